"""Command line entry point.

Example usages::

    # Build, upload, tag and set up redirects (default)
    sitepush deploy

    # Only regenerate and compress the site locally
    sitepush build

    # Show tiers, redirects and every command without running anything
    sitepush plan --today 2024-01-06

    # Walk the sync pipeline, printing commands instead of running them
    sitepush sync --dry-run
"""

from __future__ import annotations

import argparse
import datetime as _dt
import pathlib
import sys
from typing import Sequence

from .commands import RecordingRunner, SubprocessRunner
from .config import load_config
from .errors import DeployError
from .health import RunReport
from .plan import DeploymentPlan
from .report import render_plan
from .tasks import TASKS, TaskContext, run_task

PLAN_TASK = "plan"


def _parse_date(value: str) -> _dt.date:
    try:
        return _dt.date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from None


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sitepush",
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "task",
        nargs="?",
        default="deploy",
        choices=[*TASKS, PLAN_TASK],
        help="Task to run together with its prerequisites (default: deploy).",
    )
    parser.add_argument(
        "--config",
        type=pathlib.Path,
        default=None,
        help="Path to the deployment config (default: ./deploy.json or $SITEPUSH_CONFIG).",
    )
    parser.add_argument(
        "--today",
        type=_parse_date,
        default=None,
        help="Override today when computing the freshness window (YYYY-MM-DD).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print external commands instead of running them; local files are left alone.",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print the available tasks and exit.",
    )
    parser.add_argument(
        "--no-health",
        action="store_true",
        help="Do not write the heartbeat file.",
    )
    return parser.parse_args(argv)


def _print_tasks() -> None:
    print("Available tasks:")
    for task in TASKS.values():
        depends = f" (after {', '.join(task.depends)})" if task.depends else ""
        print(f" - {task.name:15s}: {task.description}{depends}")
    print(f" - {PLAN_TASK:15s}: Show the deployment plan without running anything")


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    if args.list:
        _print_tasks()
        return 0

    try:
        config = load_config(args.config)
        plan = DeploymentPlan.create(config, today=args.today)
        if args.task == PLAN_TASK:
            sys.stdout.write(render_plan(plan))
            return 0
    except DeployError as exc:
        print(f"[deploy] error: {exc}", file=sys.stderr)
        return 1

    report = None
    if not args.no_health and not args.dry_run:
        report = RunReport("deploy", config.health_path, task=args.task, today=plan.today)

    runner = RecordingRunner() if args.dry_run else SubprocessRunner(cwd=config.root)
    ctx = TaskContext(plan=plan, runner=runner, report=report, dry_run=args.dry_run)

    try:
        completed = run_task(args.task, ctx)
    except DeployError as exc:
        print(f"[deploy] error: {exc}", file=sys.stderr)
        if report is not None:
            report.record_error(str(exc))
            report.write()
        return 1

    if report is not None:
        report.write()
    print(f"\n[deploy] {args.task} completed: {', '.join(completed) or 'nothing to do'}")
    return 0
