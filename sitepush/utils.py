"""Small helpers shared across the package."""

from __future__ import annotations

from typing import Iterable

__all__ = ["unique"]


def unique(values: Iterable[str]) -> tuple[str, ...]:
    """Drop repeated values while preserving first-seen order."""

    seen: set[str] = set()
    ordered: list[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        ordered.append(value)
    return tuple(ordered)
