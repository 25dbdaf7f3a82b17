"""Configuration loading."""

from lau.config.loader import (
    home_config_exists,
    load_config,
    local_config_exists,
    resolve_corpus_root,
    save_config,
)
from lau.config.schema import DEFAULT_CONFIG, LauConfig

__all__ = [
    "DEFAULT_CONFIG",
    "LauConfig",
    "home_config_exists",
    "load_config",
    "local_config_exists",
    "resolve_corpus_root",
    "save_config",
]
