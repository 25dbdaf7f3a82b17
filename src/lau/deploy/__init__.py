"""Deployment engine."""

from lau.deploy.engine import DeploymentEngine
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

__all__ = [
    "CONFLICT_POLICIES",
    "DEFAULT_CONFLICT_POLICY",
    "ConflictPolicy",
    "DeploymentEngine",
    "DeploymentPlan",
    "DeploymentResult",
    "FileAction",
    "ProviderSelection",
    "ResolutionRequest",
]
