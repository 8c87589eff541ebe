"""Console reporting for git-wp commands and actions."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.text import Text

_T = TypeVar("_T")


def _stderr_console() -> Console:
    return Console(stderr=True, highlight=False)


@dataclass(frozen=True)
class Reporter:
    """Progress and diagnostics printer.

    ``verbose`` is fixed at construction (from ``--quiet``) and only read
    afterwards. Errors are always printed; everything else is dropped when
    ``verbose`` is false.
    """

    verbose: bool = True
    console: Console = field(default_factory=_stderr_console)

    def blank(self) -> None:
        if not self.verbose:
            return
        self.console.print()

    def step(self, header: str, detail: str = "") -> None:
        if not self.verbose:
            return
        self.console.print(self._line(header, detail, "bold green"))

    def note(self, header: str, detail: str = "") -> None:
        if not self.verbose:
            return
        self.console.print(self._line(header, detail, "dim"))

    def warn(self, header: str, detail: object = "") -> None:
        if not self.verbose:
            return
        self.console.print(self._line(header, str(detail), "bold yellow"))

    def error(self, header: str, detail: object = "") -> None:
        self.console.print(self._line(header, str(detail), "bold red"))

    def progress(self, message: str, fn: Callable[[], _T]) -> _T:
        """Run ``fn`` under a transient spinner labelled ``message``."""
        if not self.verbose:
            return fn()

        with Progress(
            SpinnerColumn(style="cyan"),
            TextColumn("[cyan]{task.description}[/cyan]"),
            transient=True,
            console=self.console,
        ) as prog:
            task_id = prog.add_task(escape(message), total=None)
            try:
                return fn()
            finally:
                prog.update(task_id, completed=1)

    @staticmethod
    def _line(header: str, detail: str, style: str) -> Text:
        line = Text(header, style=style)
        if detail:
            line.append(" ")
            line.append(detail)
        return line
