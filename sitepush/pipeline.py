"""Sync, cache tagging and redirect stages against the object store.

Each stage is expressed as a list of :class:`ExternalCommand` values first and
executed second, so ``plan`` and ``--dry-run`` show exactly what a real run
would do.
"""

from __future__ import annotations

from typing import Sequence

from .commands import ExternalCommand, Runner, execute_all
from .plan import DeploymentPlan
from .rules import CACHE_CONTROL, GlobFilterSet
from .s3cmd import S3Cmd

CONTENT_ENCODING = "Content-Encoding"
GZIP_ENCODING = "gzip"
REDIRECT_HEADER = "x-amz-website-redirect-location"

__all__ = [
    "apply_redirects",
    "client_for",
    "redirect_commands",
    "sync",
    "sync_commands",
    "tag",
    "tag_commands",
]


def client_for(plan: DeploymentPlan) -> S3Cmd:
    return S3Cmd(plan.config.require_bucket(), executable=plan.config.s3cmd)


def sync_commands(plan: DeploymentPlan, client: S3Cmd | None = None) -> list[ExternalCommand]:
    """The two ordered sync passes.

    The first uploads compressed files with their encoding header and never
    deletes.  The second uploads everything else with the generic cache header
    and is the only pass allowed to delete remote objects, so it has to run
    once the compressed files are already in place.
    """

    client = client or client_for(plan)
    tree = plan.tree
    generic = plan.generic_rule
    return [
        client.sync(
            tree,
            filters=GlobFilterSet(includes=plan.compress_globs),
            headers={CONTENT_ENCODING: GZIP_ENCODING},
            description="compressed sync",
        ),
        client.sync(
            tree,
            headers={CACHE_CONTROL: generic.header_value},
            delete_removed=True,
            cf_invalidate=plan.config.cf_invalidate,
            description="full sync",
        ),
    ]


def tag_commands(plan: DeploymentPlan, client: S3Cmd | None = None) -> list[ExternalCommand]:
    """Metadata-only passes setting encoding and per-tier cache headers."""

    client = client or client_for(plan)
    # sync only sets headers on new uploads, so the encoding is re-applied here.
    commands = [
        client.modify(
            {CONTENT_ENCODING: GZIP_ENCODING},
            filters=GlobFilterSet(includes=plan.compress_globs),
            description="encoding headers",
        )
    ]
    for rule in plan.rules:
        headers = {CACHE_CONTROL: rule.header_value}
        description = f"{rule.category_name} cache headers"
        object_path = rule.object_path
        if object_path is not None:
            commands.append(client.modify(headers, key=object_path, description=description))
        else:
            commands.append(client.modify(headers, filters=plan.filters_for(rule), description=description))
    return commands


def redirect_commands(plan: DeploymentPlan, client: S3Cmd | None = None) -> list[ExternalCommand]:
    client = client or client_for(plan)
    return [
        client.modify(
            {REDIRECT_HEADER: mapping.target},
            key=mapping.slug,
            description=f"redirect {mapping.slug}",
        )
        for mapping in plan.redirects
    ]


def _run(label: str, runner: Runner, commands: Sequence[ExternalCommand]) -> None:
    print(f"[deploy] {label}: {len(commands)} command(s)")
    execute_all(runner, commands)


def sync(plan: DeploymentPlan, runner: Runner) -> None:
    _run("sync", runner, sync_commands(plan))


def tag(plan: DeploymentPlan, runner: Runner) -> None:
    _run("set headers", runner, tag_commands(plan))


def apply_redirects(plan: DeploymentPlan, runner: Runner) -> None:
    _run("redirects", runner, redirect_commands(plan))
