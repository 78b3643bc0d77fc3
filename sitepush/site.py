"""Generate the site and pre-compress its text assets in place."""

from __future__ import annotations

import gzip
import pathlib
from typing import Iterable, Iterator, Sequence

from .commands import ExternalCommand, Runner, execute
from .errors import BuildError
from .plan import DeploymentPlan

GZIP_MAGIC = b"\x1f\x8b"

__all__ = ["build", "compress", "generator_command", "iter_compressible"]


def generator_command(plan: DeploymentPlan) -> ExternalCommand:
    config = plan.config
    return ExternalCommand(
        argv=tuple(config.generator),
        description="site generator",
        env=dict(config.generator_env),
        error=BuildError,
    )


def build(plan: DeploymentPlan, runner: Runner) -> pathlib.Path:
    """Run the generator and return the build tree it produced."""

    execute(runner, generator_command(plan))
    tree = plan.tree
    if not tree.is_dir():
        raise BuildError(f"Generator finished but {tree} does not exist")
    return tree


def _normalise_extensions(extensions: Iterable[str]) -> set[str]:
    return {"." + ext.lower().lstrip(".") for ext in extensions}


def iter_compressible(tree: pathlib.Path, extensions: Iterable[str]) -> Iterator[pathlib.Path]:
    """Yield files under ``tree`` whose suffix is one of ``extensions``."""

    suffixes = _normalise_extensions(extensions)
    for path in sorted(tree.rglob("*")):
        if path.is_file() and path.suffix.lower() in suffixes:
            yield path


def _is_gzipped(data: bytes) -> bool:
    return data[:2] == GZIP_MAGIC


def compress(tree: pathlib.Path, extensions: Sequence[str] = ("html", "css", "js")) -> int:
    """Replace each matching file's bytes with a gzip stream, keeping its name.

    Output carries no filename or timestamp so identical input gives identical
    bytes.  Files that already hold a gzip stream are skipped, which makes a
    second pass over the same tree a no-op.  Returns the number of files
    compressed.
    """

    compressed = 0
    for path in iter_compressible(tree, extensions):
        data = path.read_bytes()
        if _is_gzipped(data):
            continue
        path.write_bytes(gzip.compress(data, compresslevel=9, mtime=0))
        compressed += 1
    return compressed
