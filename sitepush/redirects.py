"""Stable short URLs served as redirect objects.

Each redirect needs a local placeholder file so the delete-removed sync pass
keeps the remote object alive; the placeholder is later tagged with the
redirect header.
"""

from __future__ import annotations

import dataclasses
import pathlib
from typing import Iterable, Mapping, Sequence

from .errors import ConfigError, ConflictError, MissingTargetError

__all__ = [
    "RedirectMapping",
    "load_redirects",
    "materialize_stubs",
    "validate_stubs",
]


@dataclasses.dataclass(frozen=True)
class RedirectMapping:
    slug: str
    target: str

    def stub_path(self, tree: pathlib.Path) -> pathlib.Path:
        return tree / self.slug

    def target_path(self, tree: pathlib.Path) -> pathlib.Path:
        return tree / self.target.lstrip("/")


def _clean_slug(raw: object) -> str:
    slug = str(raw or "").strip()
    if not slug:
        raise ConfigError("redirect slug cannot be empty")
    if slug.startswith("/"):
        raise ConfigError(f"redirect slug must be relative: {slug!r}")
    if any(part in {"", ".", ".."} for part in slug.split("/")):
        raise ConfigError(f"redirect slug has an invalid path segment: {slug!r}")
    return slug


def _clean_target(slug: str, raw: object) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise ConfigError(f"redirect {slug!r} needs a target path")
    target = raw.strip()
    if not target.startswith("/"):
        raise ConfigError(f"redirect {slug!r} target must be absolute: {target!r}")
    if ".." in target.split("/"):
        raise ConfigError(f"redirect {slug!r} target escapes the site root: {target!r}")
    return target


def load_redirects(table: Mapping[str, object] | None) -> tuple[RedirectMapping, ...]:
    """Parse a ``{slug: target}`` table into immutable mappings."""

    if table is None:
        return ()
    if not isinstance(table, Mapping):
        raise ConfigError(f"redirects must be an object, got {type(table).__name__}")
    mappings: list[RedirectMapping] = []
    for raw_slug, raw_target in table.items():
        slug = _clean_slug(raw_slug)
        mappings.append(RedirectMapping(slug=slug, target=_clean_target(slug, raw_target)))
    return tuple(mappings)


def _is_own_stub(path: pathlib.Path) -> bool:
    # A zero-byte file at the slug is a placeholder left by an earlier run.
    return path.is_file() and path.stat().st_size == 0


def validate_stubs(tree: pathlib.Path, mappings: Iterable[RedirectMapping]) -> None:
    """Raise before anything is written if a stub or target is unusable."""

    for mapping in mappings:
        stub = mapping.stub_path(tree)
        if stub.exists() and not _is_own_stub(stub):
            raise ConflictError(f"Redirect stub would overwrite {stub}")
        for parent in stub.parents:
            if parent == tree:
                break
            if parent.is_file():
                raise ConflictError(f"Redirect stub {mapping.slug} is nested under file {parent}")
        if not mapping.target_path(tree).is_file():
            raise MissingTargetError(f"Missing redirect target {mapping.target} for {mapping.slug}")


def materialize_stubs(tree: pathlib.Path, mappings: Sequence[RedirectMapping]) -> list[pathlib.Path]:
    """Create a zero-byte placeholder at every redirect slug in ``tree``.

    Every mapping is checked first, so a bad entry leaves the tree untouched.
    """

    validate_stubs(tree, mappings)
    created: list[pathlib.Path] = []
    for mapping in mappings:
        stub = mapping.stub_path(tree)
        stub.parent.mkdir(parents=True, exist_ok=True)
        stub.write_bytes(b"")
        created.append(stub)
    return created
