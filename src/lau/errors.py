"""Exception hierarchy for template resolution and deployment.

Every error carries the exit code the CLI uses when it reaches the
command boundary.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


class LauError(Exception):
    """Base exception for lau."""

    exit_code: int = 1


class CorpusError(LauError):
    """Raised when the corpus root is missing or unreadable."""


class ResolutionError(LauError):
    """Base exception for identifier lookups."""


class TemplateNotFoundError(ResolutionError):
    """Raised when no template matches an identifier."""

    exit_code = 3

    def __init__(self, identifier: str, reason: str | None = None) -> None:
        self.identifier = identifier
        self.reason = reason
        message = f"Template not found: {identifier}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class AmbiguousIdentifierError(ResolutionError):
    """Raised when a bare name matches templates in several categories."""

    exit_code = 4

    def __init__(self, identifier: str, matches: Iterable[str]) -> None:
        self.identifier = identifier
        self.matches = tuple(sorted(matches))
        super().__init__(
            f"Ambiguous template name '{identifier}', matches: "
            f"{', '.join(self.matches)}. Use the category-qualified name."
        )


class ProviderError(LauError):
    """Base exception for provider selection."""

    def __init__(self, message: str, provider: str, available: Iterable[str]) -> None:
        self.provider = provider
        self.available = frozenset(available)
        super().__init__(f"{message} (available: {', '.join(sorted(self.available))})")


class ProviderNotAvailableError(ProviderError):
    """Raised when an explicitly requested provider has no subtree."""

    exit_code = 5

    def __init__(self, template: str, provider: str, available: Iterable[str]) -> None:
        self.template = template
        super().__init__(
            f"Provider '{provider}' is not available for template '{template}'",
            provider,
            available,
        )


class NoDefaultProviderError(ProviderError):
    """Raised when a template has no default subtree to fall back on."""

    exit_code = 6

    def __init__(self, template: str, available: Iterable[str]) -> None:
        self.template = template
        super().__init__(
            f"Template '{template}' has no default provider", "default", available
        )


class IntegrityError(LauError):
    """Base exception for templates that cannot be trusted."""


class PathEscapesDestinationError(IntegrityError):
    """Raised when a template file would land outside the destination."""

    exit_code = 7

    def __init__(self, template: str, relative_path: str, destination: Path) -> None:
        self.template = template
        self.relative_path = relative_path
        self.destination = destination
        super().__init__(
            f"Template '{template}' is corrupt: '{relative_path}' escapes "
            f"destination {destination}"
        )


class DeploymentIOError(LauError):
    """Raised when copying a file fails. Earlier copies are left in place."""

    exit_code = 8

    def __init__(
        self, path: Path, cause: OSError, written: Iterable[str] = ()
    ) -> None:
        self.path = path
        self.cause = cause
        self.written = tuple(written)
        super().__init__(f"Failed to write {path}: {cause}")


class DeploymentConflictError(LauError):
    """Raised by the abort conflict policy when targets already exist."""

    exit_code = 9

    def __init__(self, template: str, conflicts: Iterable[str]) -> None:
        self.template = template
        self.conflicts = tuple(conflicts)
        super().__init__(
            f"Refusing to deploy '{template}', files already exist: "
            f"{', '.join(self.conflicts)}"
        )
