"""Provider definitions and ambient detection."""

from lau.providers.antigravity import ANTIGRAVITY
from lau.providers.base import Provider
from lau.providers.claude import CLAUDE
from lau.providers.cursor import CURSOR
from lau.providers.detector import (
    DEFAULT_MARKER_RULES,
    MarkerDetector,
    MarkerRule,
    ProviderDetector,
)
from lau.providers.openai import OPENAI
from lau.providers.windsurf import WINDSURF

__all__ = [
    "ANTIGRAVITY",
    "CLAUDE",
    "CURSOR",
    "DEFAULT_MARKER_RULES",
    "DEFAULT_PROVIDER",
    "KNOWN_PROVIDER_KEYS",
    "MarkerDetector",
    "MarkerRule",
    "OPENAI",
    "PROVIDERS",
    "Provider",
    "ProviderDetector",
    "WINDSURF",
    "get_provider_by_key",
]

# Fallback subtree every template must carry
DEFAULT_PROVIDER = "default"

# Detection order: first match wins
PROVIDERS: tuple[Provider, ...] = (
    CLAUDE,
    CURSOR,
    WINDSURF,
    ANTIGRAVITY,
    OPENAI,
)

KNOWN_PROVIDER_KEYS: frozenset[str] = frozenset(
    {p.key for p in PROVIDERS} | {DEFAULT_PROVIDER}
)


def get_provider_by_key(key: str) -> Provider | None:
    """Find a provider by key (case-insensitive)."""
    key_lower = key.lower()
    for provider in PROVIDERS:
        if provider.key == key_lower:
            return provider
    return None
