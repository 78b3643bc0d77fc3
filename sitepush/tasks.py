"""Named deployment tasks and their dependency ordering.

``deploy`` is the full pipeline::

    build -> redirect-stubs -> sync -> set-headers -> redirects

Requesting any task runs its prerequisites first, each at most once, and the
first failure stops the run.  Every task is safe to repeat, so recovering from
a failure means fixing the cause and running ``deploy`` again.
"""

from __future__ import annotations

import dataclasses
from typing import Callable

from . import pipeline
from .commands import Runner
from .health import RunReport
from .plan import DeploymentPlan
from .redirects import materialize_stubs, validate_stubs
from .site import build, compress, generator_command, iter_compressible

__all__ = ["Task", "TaskContext", "TASKS", "resolve", "run_task"]


@dataclasses.dataclass
class TaskContext:
    plan: DeploymentPlan
    runner: Runner
    report: RunReport | None = None
    dry_run: bool = False


@dataclasses.dataclass(frozen=True)
class Task:
    """Metadata describing a single pipeline task."""

    name: str
    description: str
    depends: tuple[str, ...] = ()
    action: Callable[[TaskContext], None] | None = None


def _build(ctx: TaskContext) -> None:
    plan = ctx.plan
    if ctx.dry_run:
        ctx.runner(generator_command(plan))
        if plan.tree.is_dir():
            pending = sum(1 for _ in iter_compressible(plan.tree, plan.config.compress_extensions))
            print(f"[deploy] build: would compress up to {pending} file(s) in {plan.tree}")
        return
    tree = build(plan, ctx.runner)
    count = compress(tree, plan.config.compress_extensions)
    print(f"[deploy] build: compressed {count} file(s) in {tree}")


def _redirect_stubs(ctx: TaskContext) -> None:
    plan = ctx.plan
    if ctx.dry_run:
        if plan.tree.is_dir():
            validate_stubs(plan.tree, plan.redirects)
        print(f"[deploy] redirect stubs: {len(plan.redirects)} would be created")
        return
    created = materialize_stubs(plan.tree, plan.redirects)
    print(f"[deploy] redirect stubs: created {len(created)}")


def _sync(ctx: TaskContext) -> None:
    pipeline.sync(ctx.plan, ctx.runner)


def _set_headers(ctx: TaskContext) -> None:
    pipeline.tag(ctx.plan, ctx.runner)


def _redirects(ctx: TaskContext) -> None:
    pipeline.apply_redirects(ctx.plan, ctx.runner)


TASKS: dict[str, Task] = {
    task.name: task
    for task in (
        Task("build", "Run the site generator and compress text assets", (), _build),
        Task("redirect-stubs", "Create placeholder files for redirects", ("build",), _redirect_stubs),
        Task("sync", "Upload the build tree, deleting removed objects", ("redirect-stubs",), _sync),
        Task("set-headers", "Tag objects with their cache tier headers", ("sync",), _set_headers),
        Task("redirects", "Set redirect locations on the stub objects", (), _redirects),
        Task(
            "deploy",
            "Full pipeline: build, sync, set headers and redirects",
            ("redirect-stubs", "sync", "set-headers", "redirects"),
        ),
    )
}


def resolve(name: str, tasks: dict[str, Task] | None = None) -> list[Task]:
    """Return ``name`` and its prerequisites in execution order."""

    tasks = TASKS if tasks is None else tasks
    ordered: list[Task] = []
    seen: set[str] = set()
    visiting: set[str] = set()

    def visit(task_name: str) -> None:
        if task_name in seen:
            return
        if task_name in visiting:
            raise ValueError(f"Dependency cycle through task {task_name!r}")
        try:
            task = tasks[task_name]
        except KeyError:
            raise ValueError(f"Unknown task: {task_name!r}") from None
        visiting.add(task_name)
        for dependency in task.depends:
            visit(dependency)
        visiting.discard(task_name)
        seen.add(task_name)
        ordered.append(task)

    visit(name)
    return ordered


def run_task(name: str, ctx: TaskContext, tasks: dict[str, Task] | None = None) -> list[str]:
    """Execute ``name`` with its dependencies; returns the completed task names."""

    completed: list[str] = []
    for task in resolve(name, tasks):
        if task.action is None:
            continue
        print(f"\n==> [{task.name}] {task.description}")
        task.action(ctx)
        completed.append(task.name)
        if ctx.report is not None:
            ctx.report.record_stage(task.name)
    return completed
