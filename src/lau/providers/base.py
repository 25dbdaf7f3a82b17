"""Base provider definition."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Provider:
    """Definition of an AI agent tool a template can be shaped for."""

    key: str  # Subtree directory name, e.g. "claude"
    name: str
    markers: tuple[str, ...] = ()  # Files/dirs that reveal the tool in a project

    def is_present(self, destination: Path) -> bool:
        """Check if any of this provider's markers exist in destination."""
        return any((destination / marker).exists() for marker in self.markers)
