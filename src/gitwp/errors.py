"""Error taxonomy and process exit codes for git-wp."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path

    from gitwp.actions.outcome import TaskFailure

EXIT_FAILURE = 1
EXIT_NOT_FOUND = 2
EXIT_UNCAUGHT = 3


class GitWpError(RuntimeError):
    """Base class for expected git-wp failures."""

    exit_code = EXIT_FAILURE


class ConfigError(GitWpError):
    """Raised when a worktree configuration cannot be loaded or validated."""

    exit_code = EXIT_NOT_FOUND


class ActionNotFound(GitWpError):
    """Raised when an action name has no entry in the configuration."""

    exit_code = EXIT_NOT_FOUND

    def __init__(self, action_name: str, worktree: Path | str | None = None):
        message = f'No config found for action "{action_name}"'
        if worktree is not None:
            message = f"{message} in worktree {worktree}"
        super().__init__(message)
        self.action_name = action_name
        self.worktree = worktree


class UnknownCommand(GitWpError):
    """Raised when a command name is neither built in nor a configured action."""

    exit_code = EXIT_NOT_FOUND

    def __init__(self, command: str, known: list[str]):
        super().__init__(f'Unknown command: "{command}"\n\nusage: git-wp {"|".join(known)}')
        self.command = command


class UnknownTaskType(GitWpError):
    """Raised when a task is neither an action reference nor a shell script."""

    exit_code = EXIT_NOT_FOUND

    def __init__(self, task: Any):
        super().__init__(f"Unknown task type: {_serialize_task(task)}")
        self.task = task


class TaskExecutionFailure(GitWpError):
    """Raised at the command boundary when an action ends with a propagated failure."""

    def __init__(self, failure: TaskFailure):
        super().__init__(
            f'Action "{failure.action_name}" failed at task #{failure.index}: {failure.detail}'
        )
        self.failure = failure


class GitError(GitWpError):
    """Raised when a git command fails or returns unexpected output."""


class WorkspaceError(GitWpError):
    """Raised when a workspace operation must refuse."""


def _serialize_task(task: Any) -> str:
    import dataclasses
    import json

    if dataclasses.is_dataclass(task) and not isinstance(task, type):
        task = dataclasses.asdict(task)
    try:
        return json.dumps(task, sort_keys=True, default=str)
    except (TypeError, ValueError):
        return repr(task)
