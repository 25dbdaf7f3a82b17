"""Template data model."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from lau.providers import DEFAULT_PROVIDER


@dataclass(frozen=True)
class TemplateFile:
    """One file of a provider subtree.

    Content is read from `source` at copy time, never held in memory
    or transformed.
    """

    relative_path: str  # POSIX path relative to the subtree root
    source: Path


@dataclass(frozen=True)
class ProviderSubtree:
    """Files a template ships for one provider."""

    provider: str
    files: tuple[TemplateFile, ...]
    source: Path | None = None

    @property
    def relative_paths(self) -> tuple[str, ...]:
        return tuple(f.relative_path for f in self.files)


@dataclass(frozen=True)
class Template:
    """A named unit of distribution.

    Only templates carrying a description and a non-empty default subtree
    are ever constructed by the registry.
    """

    name: str
    description: str
    subtrees: dict[str, ProviderSubtree] = field(default_factory=dict)
    category: str | None = None
    source: Path | None = None  # Template directory in the corpus

    @property
    def identifier(self) -> str:
        """Category-qualified identifier, or the bare name."""
        if self.category:
            return f"{self.category}/{self.name}"
        return self.name

    @property
    def providers(self) -> frozenset[str]:
        return frozenset(self.subtrees)

    @property
    def has_default(self) -> bool:
        return DEFAULT_PROVIDER in self.subtrees

    def subtree(self, provider: str) -> ProviderSubtree | None:
        return self.subtrees.get(provider)


@dataclass(frozen=True)
class ValidationWarning:
    """A template directory that was excluded from the corpus."""

    identifier: str
    reason: str
    source: Path | None = None

    def __str__(self) -> str:
        return f"{self.identifier}: {self.reason}"
