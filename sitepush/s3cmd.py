"""Translate filter sets and headers into ``s3cmd`` command lines."""

from __future__ import annotations

import pathlib
from typing import Mapping

from .commands import ExternalCommand
from .errors import TransferError
from .rules import GlobFilterSet

COMMON_SYNC_FLAGS: tuple[str, ...] = ("--no-mime-magic", "--no-preserve")

__all__ = ["S3Cmd", "filter_args", "header_args"]


def filter_args(filters: GlobFilterSet) -> list[str]:
    """Serialise ``filters`` the way s3cmd evaluates them.

    s3cmd applies ``--exclude`` first and then lets ``--include`` bring paths
    back, so an include-only set starts by excluding everything.
    """

    args: list[str] = []
    if filters.includes:
        args.extend(["--exclude", "*"])
    for pattern in filters.excludes:
        args.extend(["--exclude", pattern])
    for pattern in filters.includes:
        args.extend(["--include", pattern])
    return args


def header_args(headers: Mapping[str, str]) -> list[str]:
    return [f"--add-header={name}:{value}" for name, value in headers.items()]


class S3Cmd:
    """Builds commands against one bucket with a given s3cmd executable."""

    def __init__(self, bucket: str, *, executable: str = "s3cmd") -> None:
        self.bucket = bucket.rstrip("/")
        self.executable = executable

    def url(self, key: str | None = None) -> str:
        if not key:
            return self.bucket
        return f"{self.bucket}/{key.lstrip('/')}"

    def sync(
        self,
        tree: pathlib.Path,
        *,
        filters: GlobFilterSet = GlobFilterSet(),
        headers: Mapping[str, str] | None = None,
        delete_removed: bool = False,
        cf_invalidate: bool = False,
        description: str = "sync",
    ) -> ExternalCommand:
        argv: list[str] = [self.executable, "sync", *COMMON_SYNC_FLAGS]
        if cf_invalidate:
            argv.append("--cf-invalidate")
        if delete_removed:
            argv.append("--delete-removed")
        argv.append("--verbose")
        argv.extend(header_args(headers or {}))
        argv.extend(filter_args(filters))
        # Trailing slash syncs the directory contents, not the directory itself.
        argv.extend([f"{tree.as_posix().rstrip('/')}/", self.url()])
        return ExternalCommand(argv=tuple(argv), description=description, error=TransferError)

    def modify(
        self,
        headers: Mapping[str, str],
        *,
        filters: GlobFilterSet = GlobFilterSet(),
        key: str | None = None,
        description: str = "modify",
    ) -> ExternalCommand:
        """Metadata-only update of the whole bucket, or of ``key`` alone."""

        argv: list[str] = [self.executable, "modify"]
        if key is None:
            argv.append("--recursive")
            argv.extend(filter_args(filters))
        argv.extend(header_args(headers))
        argv.append(self.url(key))
        return ExternalCommand(
            argv=tuple(argv),
            description=description,
            error=TransferError,
        )
