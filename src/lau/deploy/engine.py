"""Provider selection and verbatim file deployment."""

from __future__ import annotations

import logging
import shutil
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path, PurePosixPath, PureWindowsPath

from lau.deploy.models import (
    CONFLICT_POLICIES,
    DEFAULT_CONFLICT_POLICY,
    ConflictPolicy,
    DeploymentPlan,
    DeploymentResult,
    FileAction,
    ProviderSelection,
    ResolutionRequest,
)
from lau.errors import (
    DeploymentConflictError,
    DeploymentIOError,
    NoDefaultProviderError,
    PathEscapesDestinationError,
    ProviderNotAvailableError,
)
from lau.providers import DEFAULT_PROVIDER
from lau.providers.detector import MarkerDetector, ProviderDetector
from lau.templates.base import Template

logger = logging.getLogger(__name__)


def _target_for(
    template: Template, relative_path: str, destination: Path
) -> Path:
    """Map a subtree-relative path into destination.

    Raises PathEscapesDestinationError for absolute paths and for paths
    that normalize outside destination, symlinks included.
    """
    rel = PurePosixPath(relative_path)
    if (
        not relative_path
        or rel.is_absolute()
        or PureWindowsPath(relative_path).drive
    ):
        raise PathEscapesDestinationError(
            template.identifier, relative_path, destination
        )

    target = destination.joinpath(*rel.parts)
    resolved = target.resolve()
    if resolved == destination or not resolved.is_relative_to(destination):
        raise PathEscapesDestinationError(
            template.identifier, relative_path, destination
        )
    return resolved


class DeploymentEngine:
    """Selects a provider subtree and copies it into a destination.

    File contents are transferred as bytes and never inspected.
    """

    def __init__(
        self,
        detector: ProviderDetector | None = None,
        on_conflict: ConflictPolicy = DEFAULT_CONFLICT_POLICY,
        max_workers: int = 1,
    ) -> None:
        if on_conflict not in CONFLICT_POLICIES:
            raise ValueError(f"Unknown conflict policy: {on_conflict}")
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.detector = detector if detector is not None else MarkerDetector()
        self.on_conflict = on_conflict
        self.max_workers = max_workers
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        """Stop issuing new copies; copies already done are kept."""
        self._cancelled.set()

    def select_provider(
        self, template: Template, request: ResolutionRequest
    ) -> ProviderSelection:
        """Pick the subtree: explicit override, then detected, then default."""
        available = template.providers

        detected = request.detected_provider
        if detected is None:
            detected = self.detector.detect(request.destination)

        if request.provider:
            if request.provider not in available:
                raise ProviderNotAvailableError(
                    template.identifier, request.provider, available
                )
            return ProviderSelection(request.provider, "explicit", detected)

        if detected and detected != DEFAULT_PROVIDER and detected in available:
            return ProviderSelection(detected, "detected", detected)

        if DEFAULT_PROVIDER not in available:
            raise NoDefaultProviderError(template.identifier, available)
        return ProviderSelection(DEFAULT_PROVIDER, "default", detected)

    def plan(self, template: Template, request: ResolutionRequest) -> DeploymentPlan:
        """Compute every copy a deployment would make, writing nothing."""
        selection = self.select_provider(template, request)
        logger.debug(
            "Selected provider %s for %s (%s)",
            selection.provider,
            template.identifier,
            selection.reason,
        )
        subtree = template.subtree(selection.provider)
        files = subtree.files if subtree is not None else ()

        destination = Path(request.destination).resolve()
        actions: list[FileAction] = []
        # Validate everything before anything is written
        for template_file in files:
            target = _target_for(template, template_file.relative_path, destination)
            actions.append(
                FileAction(
                    relative_path=template_file.relative_path,
                    source=template_file.source,
                    target=target,
                    exists=target.exists() or target.is_symlink(),
                )
            )

        return DeploymentPlan(
            template=template,
            selection=selection,
            destination=destination,
            actions=tuple(actions),
        )

    def deploy(
        self, template: Template, request: ResolutionRequest
    ) -> DeploymentResult:
        """Deploy a template, or simulate it when request.dry_run is set.

        Raises:
            ProviderNotAvailableError: explicit provider missing.
            PathEscapesDestinationError: nothing is written.
            DeploymentConflictError: abort policy and targets exist.
            DeploymentIOError: a copy failed; earlier copies remain.
        """
        self._cancelled.clear()
        plan = self.plan(template, request)
        conflicts = plan.conflicts

        if self.on_conflict == "skip":
            to_write = tuple(a for a in plan.actions if not a.exists)
            skipped = conflicts
        else:
            to_write = plan.actions
            skipped = ()

        files = tuple(a.relative_path for a in to_write)

        def result(
            written: tuple[str, ...] = (),
            overwritten: tuple[str, ...] = (),
            cancelled: bool = False,
        ) -> DeploymentResult:
            return DeploymentResult(
                template=template.identifier,
                provider=plan.selection.provider,
                reason=plan.selection.reason,
                destination=plan.destination,
                dry_run=request.dry_run,
                files=files,
                conflicts=conflicts,
                skipped=skipped,
                written=written,
                overwritten=overwritten,
                cancelled=cancelled,
            )

        if request.dry_run:
            return result()

        if self.on_conflict == "abort" and conflicts:
            raise DeploymentConflictError(template.identifier, conflicts)

        if self.max_workers > 1 and len(to_write) > 1:
            written = self._copy_parallel(to_write)
        else:
            written = self._copy_sequential(to_write)

        done = set(written)
        overwritten = tuple(
            a.relative_path for a in to_write if a.exists and a.relative_path in done
        )
        cancelled = len(written) < len(to_write)
        if cancelled:
            logger.warning(
                "Deployment of %s cancelled after %d of %d files",
                template.identifier,
                len(written),
                len(to_write),
            )
        return result(tuple(written), overwritten, cancelled)

    @staticmethod
    def _copy(action: FileAction) -> None:
        action.target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(action.source, action.target)
        logger.debug("Wrote %s", action.target)

    def _copy_sequential(self, actions: tuple[FileAction, ...]) -> list[str]:
        written: list[str] = []
        for action in actions:
            if self._cancelled.is_set():
                break
            try:
                self._copy(action)
            except OSError as e:
                raise DeploymentIOError(action.target, e, written) from e
            written.append(action.relative_path)
        return written

    def _copy_parallel(self, actions: tuple[FileAction, ...]) -> list[str]:
        failed = threading.Event()

        def copy_if_active(action: FileAction) -> bool:
            if self._cancelled.is_set() or failed.is_set():
                return False
            try:
                self._copy(action)
            except OSError:
                failed.set()
                raise
            return True

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [pool.submit(copy_if_active, a) for a in actions]

        written: list[str] = []
        failure: tuple[FileAction, OSError] | None = None
        for action, future in zip(actions, futures):
            error = future.exception()
            if error is None:
                if future.result():
                    written.append(action.relative_path)
            elif failure is None and isinstance(error, OSError):
                failure = (action, error)
            elif not isinstance(error, OSError):
                raise error

        if failure is not None:
            action, error = failure
            raise DeploymentIOError(action.target, error, written) from error
        return written
