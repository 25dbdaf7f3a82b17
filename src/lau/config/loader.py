"""Configuration file loading and merging."""

from __future__ import annotations

import os
from pathlib import Path

import yaml

from lau.config.schema import DEFAULT_CONFIG, LauConfig

CONFIG_FILENAME = "config.yaml"
CORPUS_DIRNAME = "templates"

ENV_CORPUS_ROOT = "LAU_CORPUS_ROOT"
ENV_ON_CONFLICT = "LAU_ON_CONFLICT"


def get_home_config_path() -> Path:
    """Get path to global config: ~/.lau/config.yaml."""
    return Path.home() / ".lau" / CONFIG_FILENAME


def get_local_config_path() -> Path:
    """Get path to local config: ./.lau/config.yaml."""
    return Path.cwd() / ".lau" / CONFIG_FILENAME


def home_config_exists() -> bool:
    """Check if the global home config exists."""
    return get_home_config_path().exists()


def local_config_exists() -> bool:
    """Check if the local project config exists."""
    return get_local_config_path().exists()


def get_package_corpus_path() -> Path:
    """Get path to the corpus bundled with the package."""
    return Path(__file__).parent.parent / "corpus"


def get_global_corpus_path() -> Path:
    """Get path to the user's corpus: ~/.lau/templates/."""
    return Path.home() / ".lau" / CORPUS_DIRNAME


def get_local_corpus_path() -> Path:
    """Get path to a project corpus: ./.lau/templates/."""
    return Path.cwd() / ".lau" / CORPUS_DIRNAME


def load_yaml_config(path: Path) -> dict[str, object] | None:
    """Load a YAML config file, return None if not found or empty."""
    if not path.exists():
        return None
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
            if data is None:
                return None
            if not isinstance(data, dict):
                return None
            result: dict[str, object] = data
            return result
    except yaml.YAMLError:
        return None


def load_env_config() -> LauConfig:
    """Build a config layer from LAU_* environment variables."""
    return LauConfig.from_dict(
        {
            "corpus_root": os.environ.get(ENV_CORPUS_ROOT) or None,
            "on_conflict": os.environ.get(ENV_ON_CONFLICT) or None,
        }
    )


def load_config() -> LauConfig:
    """Load merged configuration.

    Precedence (lowest to highest):
    1. Built-in defaults
    2. Global config (~/.lau/config.yaml)
    3. Local config (./.lau/config.yaml)
    4. LAU_CORPUS_ROOT / LAU_ON_CONFLICT environment variables

    Returns merged LauConfig.
    """
    config = DEFAULT_CONFIG

    home_data = load_yaml_config(get_home_config_path())
    if home_data:
        config = config.merge(LauConfig.from_dict(home_data))

    local_data = load_yaml_config(get_local_config_path())
    if local_data:
        config = config.merge(LauConfig.from_dict(local_data))

    return config.merge(load_env_config())


def save_config(config: LauConfig, path: Path) -> None:
    """Save config to a YAML file.

    Creates parent directories if needed.
    Only saves non-None values.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)


def resolve_corpus_root(config: LauConfig, override: Path | None = None) -> Path:
    """Resolve which corpus to read.

    Resolution order:
    1. Explicit override (--corpus)
    2. Configured corpus_root (config files or LAU_CORPUS_ROOT)
    3. Local project corpus (./.lau/templates/)
    4. Global user corpus (~/.lau/templates/)
    5. Corpus bundled with the package
    """
    if override is not None:
        return override.expanduser()
    if config.corpus_root:
        return Path(config.corpus_root).expanduser()

    for candidate in (get_local_corpus_path(), get_global_corpus_path()):
        if candidate.is_dir():
            return candidate

    return get_package_corpus_path()
