"""External command abstraction and the runners that execute it.

Stages never call :mod:`subprocess` directly.  They build
:class:`ExternalCommand` values and hand them to a runner, which keeps the
argument lists inspectable and lets tests swap in a fake.
"""

from __future__ import annotations

import dataclasses
import os
import pathlib
import shlex
import subprocess
from typing import Callable, Mapping, Sequence

from .errors import DeployError, TransferError

__all__ = [
    "ExternalCommand",
    "RecordingRunner",
    "Runner",
    "SubprocessRunner",
    "execute",
    "execute_all",
]


@dataclasses.dataclass(frozen=True)
class ExternalCommand:
    """One blocking invocation of an external tool."""

    argv: tuple[str, ...]
    description: str = ""
    env: Mapping[str, str] = dataclasses.field(default_factory=dict)
    ok_codes: tuple[int, ...] = (0,)
    error: type[DeployError] = TransferError

    def display(self) -> str:
        prefix = " ".join(f"{key}={shlex.quote(value)}" for key, value in sorted(self.env.items()))
        command = shlex.join(self.argv)
        return f"{prefix} {command}" if prefix else command


Runner = Callable[[ExternalCommand], int]


class SubprocessRunner:
    """Run commands for real, streaming their output to the terminal."""

    def __init__(self, *, cwd: pathlib.Path | None = None, echo: bool = True) -> None:
        self.cwd = cwd
        self.echo = echo

    def __call__(self, command: ExternalCommand) -> int:
        if self.echo:
            print("   $", command.display())
        env = None
        if command.env:
            env = {**os.environ, **command.env}
        try:
            result = subprocess.run(list(command.argv), cwd=self.cwd, env=env)
        except OSError as exc:
            raise command.error(
                f"{command.argv[0]}: cannot execute ({exc.strerror or exc})",
                command=command.argv,
            ) from exc
        return result.returncode


class RecordingRunner:
    """Collect commands instead of running them (``--dry-run``)."""

    def __init__(self, *, echo: bool = True) -> None:
        self.echo = echo
        self.commands: list[ExternalCommand] = []

    def __call__(self, command: ExternalCommand) -> int:
        self.commands.append(command)
        if self.echo:
            print("   (dry-run) $", command.display())
        return 0


def execute(runner: Runner, command: ExternalCommand) -> None:
    """Run ``command`` and raise its error class on an unexpected exit code."""

    returncode = runner(command)
    if returncode in command.ok_codes:
        return
    label = command.description or command.argv[0]
    raise command.error(
        f"{label} failed with exit code {returncode}: {command.display()}",
        command=command.argv,
        returncode=returncode,
    )


def execute_all(runner: Runner, commands: Sequence[ExternalCommand]) -> None:
    for command in commands:
        execute(runner, command)
