"""Deploy a generated static site to S3 with tiered cache headers and redirects."""

from .errors import (
    BuildError,
    ConfigError,
    ConflictError,
    DeployError,
    MissingTargetError,
    TransferError,
    ValidationError,
)
from .plan import DeploymentPlan
from .redirects import RedirectMapping, materialize_stubs
from .rules import ContentRule, GlobFilterSet, classify, window

__all__ = [
    "BuildError",
    "ConfigError",
    "ConflictError",
    "ContentRule",
    "DeployError",
    "DeploymentPlan",
    "GlobFilterSet",
    "MissingTargetError",
    "RedirectMapping",
    "TransferError",
    "ValidationError",
    "classify",
    "materialize_stubs",
    "window",
]
