"""Shell task spawning with interrupt forwarding."""

from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
import threading
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager

from gitwp.config.types import Shell

logger = logging.getLogger(__name__)

SHELL_EXECUTABLES: dict[Shell, str] = {
    Shell.BASH: "bash",
    Shell.NUSHELL: "nu",
}


def nu_quote(value: str) -> str:
    """Quote ``value`` as a nushell raw string literal."""
    hashes = "#"
    while f"'{hashes}" in value:
        hashes += "#"
    return f"r{hashes}'{value}'{hashes}"


def wrap_script(shell: Shell, script: str, args: Sequence[str]) -> str:
    """Wrap ``script`` in a function named ``action`` and call it with ``args``."""
    body = script if script.endswith("\n") else f"{script}\n"
    if shell is Shell.BASH:
        quoted = " ".join(shlex.quote(arg) for arg in args)
        return f"function action() {{\nset -e\n{body}}}\naction {quoted}\n"
    if shell is Shell.NUSHELL:
        quoted = " ".join(nu_quote(arg) for arg in args)
        return f"def --wrapped action [...args] {{\n{body}}}\naction {quoted}\n"
    raise ValueError(f"Unsupported shell: {shell!r}")


def shell_argv(shell: Shell, script: str, args: Sequence[str]) -> list[str]:
    return [SHELL_EXECUTABLES[shell], "-c", wrap_script(shell, script, args)]


@contextmanager
def forward_interrupts(process: subprocess.Popen) -> Iterator[None]:
    """Forward SIGINT to ``process`` until the block exits.

    The previous handler is restored on every exit path. Off the main
    thread, where handlers cannot be installed, this is a no-op.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _forward(signum: int, frame: object) -> None:
        if process.poll() is None:
            process.send_signal(signal.SIGINT)

    previous = signal.signal(signal.SIGINT, _forward)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous if previous is not None else signal.SIG_DFL)


def run_shell(
    shell: Shell,
    script: str,
    args: Sequence[str],
    *,
    env: Mapping[str, str],
    cwd: str | os.PathLike[str] | None = None,
) -> int:
    """Run a wrapped script in the foreground and return its exit status."""
    argv = shell_argv(shell, script, args)
    logger.debug("spawning %s task with args %s", shell.value, list(args))
    with subprocess.Popen(argv, env=dict(env), cwd=cwd) as process, forward_interrupts(process):
        return process.wait()
