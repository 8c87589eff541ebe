"""Terminal tab integration (WezTerm)."""

from __future__ import annotations

from pathlib import Path

from gitwp.errors import WorkspaceError
from gitwp.git.exec import run_command
from gitwp.settings import Settings

WEZTERM = "WezTerm"


class UnsupportedTerminal(WorkspaceError):
    """Raised when the running terminal has no tab integration."""


def tab_title(name: str, project_name: str | None) -> str:
    return f"{project_name}:{name}" if project_name else name


def open_tab(path: Path | str, name: str, *, project_name: str | None, settings: Settings) -> str:
    """Spawn a tab rooted at ``path`` and title it; return the new pane id."""
    if settings.term_program != WEZTERM:
        raise UnsupportedTerminal("Can't open tabs in this terminal")

    pane_id = run_command(["wezterm", "cli", "spawn", "--cwd", str(path)]).output
    run_command(
        ["wezterm", "cli", "set-tab-title", "--pane-id", pane_id, tab_title(name, project_name)]
    )
    return pane_id


def close_tab(*, settings: Settings) -> str:
    if settings.term_program != WEZTERM:
        raise UnsupportedTerminal("Can't close tabs in this terminal")
    return run_command(["wezterm", "cli", "kill-pane"]).output
