"""Configuration schema for lau."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, cast

from lau.deploy.models import CONFLICT_POLICIES, ConflictPolicy


@dataclass
class LauConfig:
    """lau configuration schema.

    Fields mirror the options of `lau add`. None means "not set" and is
    filled in from a lower layer or the built-in defaults.
    """

    corpus_root: str | None = None
    provider: str | None = None  # Preferred provider, used as the ambient signal
    on_conflict: ConflictPolicy | None = None
    parallel: int | None = None

    def merge(self, other: LauConfig) -> LauConfig:
        """Merge another config into this one.

        Values from `other` take precedence when they are not None.
        Returns a new LauConfig instance.
        """
        return LauConfig(
            corpus_root=(
                other.corpus_root if other.corpus_root is not None else self.corpus_root
            ),
            provider=other.provider if other.provider is not None else self.provider,
            on_conflict=(
                other.on_conflict if other.on_conflict is not None else self.on_conflict
            ),
            parallel=other.parallel if other.parallel is not None else self.parallel,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary, excluding None values."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                result[f.name] = value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LauConfig:
        """Create a LauConfig from a dictionary.

        Unknown keys are ignored. Invalid values are dropped.
        """
        corpus_root_raw = data.get("corpus_root")
        corpus_root = str(corpus_root_raw) if corpus_root_raw is not None else None
        provider_raw = data.get("provider")
        provider = str(provider_raw).lower() if provider_raw else None

        on_conflict_raw = data.get("on_conflict")
        on_conflict: ConflictPolicy | None = None
        if on_conflict_raw in CONFLICT_POLICIES:
            on_conflict = cast(ConflictPolicy, on_conflict_raw)

        parallel: int | None = None
        parallel_raw = data.get("parallel")
        if parallel_raw is not None:
            try:
                parallel = max(1, int(parallel_raw))
            except (TypeError, ValueError):
                parallel = None

        return cls(
            corpus_root=corpus_root,
            provider=provider,
            on_conflict=on_conflict,
            parallel=parallel,
        )


# Default configuration values (used when not specified anywhere)
DEFAULT_CONFIG = LauConfig(
    on_conflict="overwrite",
    parallel=1,
)
