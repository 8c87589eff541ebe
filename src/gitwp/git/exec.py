"""Captured subprocess execution for git and terminal helpers."""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path

from gitwp.errors import GitError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecResult:
    """Captured outcome of one finished command."""

    argv: tuple[str, ...]
    cwd: Path
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Stdout without surrounding whitespace; most git queries print one value."""
        return self.stdout.strip()

    def describe(self) -> str:
        return f"`{shlex.join(self.argv)}` in {self.cwd}"


class ExecError(GitError):
    """A command run in check mode exited non-zero."""

    def __init__(self, result: ExecResult):
        message = f"{result.describe()} exited with code {result.returncode}"
        diagnostics = result.stderr.strip() or result.output
        if diagnostics:
            message = f"{message}:\n{diagnostics}"
        super().__init__(message)
        self.result = result


def run_command(
    argv: list[str],
    *,
    cwd: Path | None = None,
    check: bool = True,
    input: str | None = None,
) -> ExecResult:
    """Run ``argv`` with captured text output.

    ``cwd`` defaults to the process working directory at call time, which
    the action engine moves into the target worktree. ``input`` is fed to
    stdin; without it the child gets no stdin data.
    """
    workdir = Path.cwd() if cwd is None else Path(cwd).resolve()
    logger.debug("exec %s", shlex.join(argv) if input is None else f"{shlex.join(argv)} <<stdin")
    completed = subprocess.run(
        argv,
        cwd=workdir,
        input=input if input is not None else "",
        capture_output=True,
        text=True,
        check=False,
    )
    result = ExecResult(tuple(argv), workdir, completed.returncode, completed.stdout, completed.stderr)
    if check and not result.ok:
        raise ExecError(result)
    return result


def run_git(
    args: list[str],
    *,
    cwd: Path | None = None,
    check: bool = True,
    input: str | None = None,
) -> ExecResult:
    return run_command(["git", *args], cwd=cwd, check=check, input=input)
