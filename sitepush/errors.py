"""Exceptions raised by the deployment pipeline."""

from __future__ import annotations

from typing import Sequence

__all__ = [
    "DeployError",
    "ConfigError",
    "ValidationError",
    "ConflictError",
    "MissingTargetError",
    "BuildError",
    "TransferError",
]


class DeployError(Exception):
    """Base class for every fatal deployment failure."""

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] | None = None,
        returncode: int | None = None,
    ) -> None:
        super().__init__(message)
        self.command = tuple(command) if command is not None else None
        self.returncode = returncode


class ConfigError(DeployError):
    """The deployment configuration file or environment is unusable."""


class ValidationError(DeployError):
    """Pre-flight check failed before anything touched the remote store."""


class ConflictError(ValidationError):
    """A redirect stub would overwrite real content in the build tree."""


class MissingTargetError(ValidationError):
    """A redirect points at a path the build tree does not contain."""


class BuildError(DeployError):
    """The site generator failed or produced no output."""


class TransferError(DeployError):
    """A sync or metadata command against the object store failed."""
