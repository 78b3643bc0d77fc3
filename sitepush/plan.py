"""The per-run deployment plan handed to every stage."""

from __future__ import annotations

import dataclasses
import datetime as _dt
import pathlib

from .config import SiteConfig
from .redirects import RedirectMapping
from .rules import GENERIC, ContentRule, GlobFilterSet, classify, filters_for, window

__all__ = ["DeploymentPlan"]


@dataclasses.dataclass(frozen=True)
class DeploymentPlan:
    """Everything a run needs, computed once from config and today's date."""

    today: _dt.date
    config: SiteConfig
    rules: tuple[ContentRule, ...]
    window: tuple[str, ...]

    @classmethod
    def create(cls, config: SiteConfig, today: _dt.date | None = None) -> "DeploymentPlan":
        today = today or _dt.date.today()
        return cls(
            today=today,
            config=config,
            rules=tuple(classify(today, days=config.window_days, sentinel=config.empty_match_fails)),
            window=tuple(window(today, config.window_days)),
        )

    @property
    def tree(self) -> pathlib.Path:
        return self.config.tree

    @property
    def redirects(self) -> tuple[RedirectMapping, ...]:
        return self.config.redirects

    @property
    def generic_rule(self) -> ContentRule:
        return self.rule(GENERIC)

    def rule(self, name: str) -> ContentRule:
        for rule in self.rules:
            if rule.category_name == name:
                return rule
        raise KeyError(name)

    def filters_for(self, rule: ContentRule) -> GlobFilterSet:
        return filters_for(rule, self.rules)

    @property
    def compress_globs(self) -> tuple[str, ...]:
        return tuple(f"*.{ext}" for ext in self.config.compress_extensions)
