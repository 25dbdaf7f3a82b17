"""Ambient provider detection from marker files in a destination."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from lau.providers.antigravity import ANTIGRAVITY
from lau.providers.base import Provider
from lau.providers.claude import CLAUDE
from lau.providers.cursor import CURSOR
from lau.providers.openai import OPENAI
from lau.providers.windsurf import WINDSURF

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkerRule:
    """A marker path whose presence signals a provider."""

    marker: str
    provider: str


def rules_for(providers: Iterable[Provider]) -> tuple[MarkerRule, ...]:
    """Flatten provider markers into an ordered rule list."""
    return tuple(
        MarkerRule(marker=marker, provider=provider.key)
        for provider in providers
        for marker in provider.markers
    )


DEFAULT_MARKER_RULES: tuple[MarkerRule, ...] = rules_for(
    (CLAUDE, CURSOR, WINDSURF, ANTIGRAVITY, OPENAI)
)


class ProviderDetector(ABC):
    """Base class for ambient provider detection."""

    @abstractmethod
    def detect(self, destination: Path) -> str | None:
        """Return the provider key signalled by destination, or None."""
        ...


class MarkerDetector(ProviderDetector):
    """Detects providers by checking rules in order; first hit wins."""

    def __init__(self, rules: Iterable[MarkerRule] = DEFAULT_MARKER_RULES) -> None:
        self.rules = tuple(rules)

    def detect(self, destination: Path) -> str | None:
        for rule in self.rules:
            if (destination / rule.marker).exists():
                logger.debug(
                    "Detected provider %s via %s", rule.provider, rule.marker
                )
                return rule.provider
        return None
