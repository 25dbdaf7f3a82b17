"""Deployment request and result types."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from lau.templates.base import Template

ConflictPolicy = Literal["overwrite", "skip", "abort"]
SelectionReason = Literal["explicit", "detected", "default"]

CONFLICT_POLICIES: tuple[str, ...] = ("overwrite", "skip", "abort")
DEFAULT_CONFLICT_POLICY: ConflictPolicy = "overwrite"


@dataclass(frozen=True)
class ResolutionRequest:
    """What the caller asked for in one invocation.

    `detected_provider` is the ambient signal; when None the engine runs
    its detector over `destination`.
    """

    identifier: str
    destination: Path
    provider: str | None = None  # Explicit override
    detected_provider: str | None = None
    dry_run: bool = False


@dataclass(frozen=True)
class ProviderSelection:
    """Which subtree was chosen and why."""

    provider: str
    reason: SelectionReason
    detected: str | None = None  # Ambient signal, even if it went unused


@dataclass(frozen=True)
class FileAction:
    """A single planned copy."""

    relative_path: str
    source: Path
    target: Path
    exists: bool  # Target already present before deployment


@dataclass(frozen=True)
class DeploymentPlan:
    """Everything a deployment would do, computed without writing."""

    template: Template
    selection: ProviderSelection
    destination: Path
    actions: tuple[FileAction, ...]

    @property
    def conflicts(self) -> tuple[str, ...]:
        return tuple(a.relative_path for a in self.actions if a.exists)


@dataclass(frozen=True)
class DeploymentResult:
    """Report of a deployment or dry run.

    `files` is the planned write list and is the same for dry run and
    apply. `written` holds only files actually copied.
    """

    template: str
    provider: str
    reason: SelectionReason
    destination: Path
    dry_run: bool
    files: tuple[str, ...]
    conflicts: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()
    written: tuple[str, ...] = ()
    overwritten: tuple[str, ...] = ()
    cancelled: bool = False

    @property
    def complete(self) -> bool:
        """True when every planned file was written."""
        return not self.dry_run and len(self.written) == len(self.files)
