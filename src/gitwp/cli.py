"""git-wp command line interface."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import click
import typer
from typer.core import TyperGroup

from gitwp import __version__
from gitwp.actions import ExecutionContext, run_action
from gitwp.config import read_config
from gitwp.errors import (
    EXIT_UNCAUGHT,
    ActionNotFound,
    GitWpError,
    UnknownCommand,
    WorkspaceError,
)
from gitwp.git.worktrees import (
    GitWorkspaceInfo,
    list_worktrees,
    retrieve_current_worktree,
    retrieve_main_worktree,
)
from gitwp.settings import Settings
from gitwp.tabs import close_tab
from gitwp.ui import Reporter
from gitwp.workspace import (
    copy_config,
    create_worktree,
    delete_worktree,
    init_config,
    init_workspace,
    open_worktree,
)

_FALLBACK_KEY = "gitwp.fallback_command"


class ActionFallbackGroup(TyperGroup):
    """Route unknown command names to ``action`` so configured actions run directly."""

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        if args and not args[0].startswith("-") and self.get_command(ctx, args[0]) is None:
            ctx.meta[_FALLBACK_KEY] = args[0]
            args = ["action", *args]
        return super().resolve_command(ctx, args)


cli = typer.Typer(
    name="git-wp",
    help="Git worktree workspaces: one bare repository, one worktree per branch.",
    cls=ActionFallbackGroup,
    no_args_is_help=True,
)

_PASSTHROUGH = {
    "allow_extra_args": True,
    "ignore_unknown_options": True,
    # --help belongs to the action's script
    "help_option_names": [],
}


@dataclass(frozen=True)
class CliState:
    """Options shared by every command."""

    reporter: Reporter
    settings: Settings
    worktree: Path | None

    def target_worktree(self) -> Path:
        if self.worktree is not None:
            return self.worktree.resolve()
        return Path(retrieve_current_worktree())

    def main_worktree(self) -> Path | None:
        main = retrieve_main_worktree(self.settings, self.target_worktree())
        return Path(main) if main is not None else None


def _version_option_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@cli.callback()
def _cli_callback(
    ctx: typer.Context,
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print errors."),
    worktree: Path | None = typer.Option(
        None,
        "--worktree",
        "--wk",
        help="Worktree to operate on (defaults to the current one).",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show git-wp version and exit.",
        is_eager=True,
        callback=_version_option_callback,
    ),
) -> None:
    ctx.obj = CliState(
        reporter=Reporter(verbose=not quiet),
        settings=Settings.from_env(),
        worktree=worktree,
    )


@contextmanager
def _handle_errors(state: CliState) -> Iterator[None]:
    try:
        yield
    except GitWpError as exc:
        state.reporter.error("ERROR", exc)
        raise typer.Exit(exc.exit_code) from exc
    except Exception as exc:
        state.reporter.error("ERROR", f"{type(exc).__name__}: {exc}")
        raise typer.Exit(EXIT_UNCAUGHT) from exc


@cli.command("init")
def init_cmd(
    ctx: typer.Context,
    project_name: str = typer.Argument(..., metavar="PROJECT"),
) -> None:
    """Create a workspace in the current directory."""
    state: CliState = ctx.obj
    with _handle_errors(state):
        init_workspace(
            project_name,
            root=Path.cwd(),
            settings=state.settings,
            reporter=state.reporter,
        )


@cli.command("add")
def add_cmd(ctx: typer.Context, branch: str = typer.Argument(...)) -> None:
    """Create a worktree for BRANCH."""
    state: CliState = ctx.obj
    with _handle_errors(state):
        path = create_worktree(
            state.target_worktree(),
            branch,
            settings=state.settings,
            reporter=state.reporter,
        )
        typer.echo(str(path))


@cli.command("open")
def open_cmd(ctx: typer.Context, branch: str = typer.Argument(...)) -> None:
    """Open a terminal tab on BRANCH's worktree, creating it when missing."""
    state: CliState = ctx.obj
    with _handle_errors(state):
        open_worktree(
            state.target_worktree(),
            branch,
            settings=state.settings,
            reporter=state.reporter,
        )


@cli.command("delete")
def delete_cmd(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force/--no-force", "-f", help="Remove even with local changes."),
    delete_branch: bool = typer.Option(
        False, "--delete-branch/--no-delete-branch", "-d", help="Delete the branch when fully merged."
    ),
    force_delete_branch: bool = typer.Option(
        False, "--force-delete-branch/--no-force-delete-branch", "-D", help="Delete the branch unconditionally."
    ),
) -> None:
    """Delete the target worktree (and close its tab when it is the current one)."""
    state: CliState = ctx.obj
    with _handle_errors(state):
        target = state.target_worktree()
        delete_worktree(
            target,
            state.main_worktree(),
            reporter=state.reporter,
            force=force,
            delete_branch=delete_branch,
            force_delete_branch=force_delete_branch,
        )
        if state.worktree is None:
            close_tab(settings=state.settings)


@cli.command("list")
def list_cmd(ctx: typer.Context) -> None:
    """List worktrees of the workspace."""
    state: CliState = ctx.obj
    with _handle_errors(state):
        for entry in list_worktrees(state.worktree):
            if entry.bare:
                label = "(bare)"
            elif entry.detached:
                label = "(detached)"
            else:
                label = (entry.branch or "").removeprefix("refs/heads/")
            typer.echo(f"{entry.path}\t{label}")


@cli.command("config:init")
def config_init_cmd(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force/--no-force", "-f", help="Overwrite an existing config."),
) -> None:
    """Write the default action config into the target worktree."""
    state: CliState = ctx.obj
    with _handle_errors(state):
        init_config(state.target_worktree(), reporter=state.reporter, force=force)


@cli.command("config:copy")
def config_copy_cmd(
    ctx: typer.Context,
    source: Path | None = typer.Argument(None, metavar="[FROM]"),
    force: bool = typer.Option(False, "--force/--no-force", "-f", help="Overwrite an existing config."),
) -> None:
    """Copy the action config from FROM (defaults to the main worktree)."""
    state: CliState = ctx.obj
    with _handle_errors(state):
        target = state.target_worktree()
        origin = source.resolve() if source is not None else state.main_worktree()
        if origin is None:
            raise WorkspaceError("Missing source worktree")
        if origin == target:
            raise WorkspaceError("Cannot copy config from current worktree")
        copy_config(target, source=origin, reporter=state.reporter, force=force)


@cli.command("action", context_settings=_PASSTHROUGH)
def action_cmd(
    ctx: typer.Context,
    name: str = typer.Argument(..., metavar="ACTION"),
    args: list[str] | None = typer.Argument(None, metavar="[ARGS]..."),
) -> None:
    """Run a configured action; ARGS become the scripts' positional parameters."""
    state: CliState = ctx.obj
    with _handle_errors(state):
        target = state.target_worktree()
        context = ExecutionContext(
            action_name=name,
            config=read_config(dir=target),
            workspace_info=GitWorkspaceInfo(settings=state.settings, cwd=target),
            args=tuple(args or ()) + tuple(ctx.args),
            worktree=str(target),
            reporter=state.reporter,
        )
        try:
            run_action(context)
        except ActionNotFound as exc:
            # a mistyped built-in command is reported as such
            if exc.action_name != name or ctx.meta.get(_FALLBACK_KEY) != name:
                raise
            raise UnknownCommand(name, _command_names(ctx)) from exc


def _command_names(ctx: typer.Context) -> list[str]:
    group = ctx.find_root()
    return [cmd for cmd in group.command.list_commands(group) if cmd != "action"]  # type: ignore[attr-defined]


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
