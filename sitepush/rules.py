"""Cache tiers and the glob filters derived from them.

Every object in the build tree belongs to exactly one cache tier.  Tiers are
listed in priority order; the generic tier has no positive pattern and is
instead restricted by excluding everything the other tiers claim, so it can
never overwrite their headers.
"""

from __future__ import annotations

import dataclasses
import datetime as _dt
from typing import Sequence

from .utils import unique

CACHE_CONTROL = "Cache-Control"
CACHE_CONTROL_TEMPLATE = "public, max-age={ttl}"

STATIC_TTL = 24 * 60 * 60
FRESH_TTL = 5 * 60
NOT_FOUND_TTL = 2 * 60
GENERIC_TTL = 60 * 60

STATIC = "static"
FRESH = "fresh"
NOT_FOUND = "not-found"
GENERIC = "generic"

STATIC_GLOBS: tuple[str, ...] = ("css/*", "images/*", "fonts/*", "photos/*", "talks/*")
NOT_FOUND_PAGE = "404.html"
DEFAULT_WINDOW_DAYS = 7

__all__ = [
    "ContentRule",
    "GlobFilterSet",
    "cache_control",
    "classify",
    "filters_for",
    "generic_excludes",
    "window",
]


def _is_literal(pattern: str) -> bool:
    return not any(ch in pattern for ch in "*?[")


def cache_control(ttl_seconds: int) -> str:
    """Return the ``Cache-Control`` value for ``ttl_seconds``."""

    return CACHE_CONTROL_TEMPLATE.format(ttl=int(ttl_seconds))


@dataclasses.dataclass(frozen=True)
class GlobFilterSet:
    """Ordered include/exclude patterns driving a single store operation."""

    includes: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()


@dataclasses.dataclass(frozen=True)
class ContentRule:
    """A cache tier: one TTL shared by every path its globs match."""

    category_name: str
    ttl_seconds: int
    include_globs: tuple[str, ...] = ()

    @property
    def header_value(self) -> str:
        return cache_control(self.ttl_seconds)

    @property
    def object_path(self) -> str | None:
        """The single object this rule targets, when it names exactly one file."""

        if len(self.include_globs) == 1 and _is_literal(self.include_globs[0]):
            return self.include_globs[0]
        return None

    @property
    def is_fallback(self) -> bool:
        return not self.include_globs


def window(today: _dt.date, days: int = DEFAULT_WINDOW_DAYS) -> list[str]:
    """Return one ``YYYY/MM/DD/*`` glob per day in ``[today - days + 1, today]``.

    The oldest day comes first.  Callers must pass the date of the current run;
    the result is never cached, so posts drop out of the short-lived tier at
    the midnight boundary of the machine running the deployment.
    """

    if days < 1:
        raise ValueError(f"window needs at least one day, got {days}")
    start = today - _dt.timedelta(days=days - 1)
    return [
        (start + _dt.timedelta(days=offset)).strftime("%Y/%m/%d") + "/*"
        for offset in range(days)
    ]


def classify(
    today: _dt.date,
    *,
    days: int = DEFAULT_WINDOW_DAYS,
    sentinel: bool = True,
    static_globs: Sequence[str] = STATIC_GLOBS,
    not_found_page: str = NOT_FOUND_PAGE,
) -> list[ContentRule]:
    """Build the cache tiers for a run on ``today``, highest priority first.

    With ``sentinel`` set the freshness tier also matches the not-found page,
    which always exists, so a week without posts does not produce a filter
    that matches nothing.  The not-found tier runs afterwards and restores the
    page's own TTL.
    """

    fresh_globs = list(window(today, days))
    if sentinel:
        fresh_globs.append(not_found_page)

    return [
        ContentRule(STATIC, STATIC_TTL, tuple(static_globs)),
        ContentRule(FRESH, FRESH_TTL, tuple(fresh_globs)),
        ContentRule(NOT_FOUND, NOT_FOUND_TTL, (not_found_page,)),
        ContentRule(GENERIC, GENERIC_TTL, ()),
    ]


def generic_excludes(rules: Sequence[ContentRule]) -> tuple[str, ...]:
    """Union of every specific tier's include globs, in priority order."""

    return unique(glob for rule in rules if not rule.is_fallback for glob in rule.include_globs)


def filters_for(rule: ContentRule, rules: Sequence[ContentRule]) -> GlobFilterSet:
    """Return the filter set restricting a metadata pass to ``rule``'s objects."""

    if rule.is_fallback:
        return GlobFilterSet(excludes=generic_excludes(rules))
    return GlobFilterSet(includes=unique(rule.include_globs))
