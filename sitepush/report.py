"""Render a deployment plan as text using Jinja2 templates."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from . import pipeline
from .plan import DeploymentPlan
from .site import generator_command

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["duration"] = format_duration
    return env


def format_duration(seconds: int) -> str:
    """``86400`` -> ``24h``, ``300`` -> ``5m``, ``90`` -> ``90s``."""

    if seconds and seconds % 3600 == 0:
        return f"{seconds // 3600}h"
    if seconds and seconds % 60 == 0:
        return f"{seconds // 60}m"
    return f"{seconds}s"


def render_plan(plan: DeploymentPlan) -> str:
    """Describe tiers, redirects and every command a ``deploy`` would run."""

    client = pipeline.client_for(plan)
    stages = [
        ("build", [generator_command(plan)]),
        ("sync", pipeline.sync_commands(plan, client)),
        ("set-headers", pipeline.tag_commands(plan, client)),
        ("redirects", pipeline.redirect_commands(plan, client)),
    ]
    template = _environment().get_template("plan.txt")
    return template.render(
        plan=plan,
        config=plan.config,
        rules=[(rule, plan.filters_for(rule)) for rule in plan.rules],
        stages=stages,
    )
