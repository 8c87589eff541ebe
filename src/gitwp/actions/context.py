"""Execution context and task environment for the action engine."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

from gitwp.config.types import Config
from gitwp.ui import Reporter

ENV_ACTION_NAME = "GIT_WP_ACTION_NAME"
ENV_ACTION = "GIT_WP_ACTION"
ENV_BARE_PATH = "GIT_WP_BARE_PATH"
ENV_BRANCH_NAME = "GIT_WP_BRANCH_NAME"
ENV_BRANCH = "GIT_WP_BRANCH"
ENV_MAIN_PATH = "GIT_WP_MAIN_PATH"
ENV_PROJECT_NAME = "GIT_WP_PROJECT_NAME"
ENV_PROJECT = "GIT_WP_PROJECT"
ENV_WORKTREE_PATH = "GIT_WP_WORKTREE_PATH"
ENV_WORKTREE = "GIT_WP_WORKTREE"

TaskEnv = Mapping[str, str | None]


class WorkspaceInfo(Protocol):
    """Workspace queries the engine needs to seed a task environment."""

    def current_branch(self, worktree: str | None = None) -> str: ...

    def project_name(self) -> str | None: ...

    def bare_repo_path(self) -> str: ...

    def main_worktree_path(self) -> str | None: ...


@dataclass(frozen=True)
class ExecutionContext:
    """Per-invocation state threaded through recursive action calls.

    ``env`` stays ``None`` until the outermost call builds it.
    """

    action_name: str
    config: Config
    workspace_info: WorkspaceInfo
    args: tuple[str, ...] = ()
    worktree: str | None = None
    env: TaskEnv | None = None
    nested: bool = False
    silent: bool | None = None
    reporter: Reporter = field(default_factory=Reporter)


def build_environment(
    workspace_info: WorkspaceInfo,
    *,
    action_name: str,
    worktree: str | None,
) -> dict[str, str | None]:
    """Query the workspace once and expose it under the GIT_WP_* names."""
    branch = workspace_info.current_branch(worktree)
    project = workspace_info.project_name()
    return {
        ENV_ACTION_NAME: action_name,
        ENV_ACTION: action_name,
        ENV_BARE_PATH: workspace_info.bare_repo_path(),
        ENV_BRANCH_NAME: branch,
        ENV_BRANCH: branch,
        ENV_MAIN_PATH: workspace_info.main_worktree_path(),
        ENV_PROJECT_NAME: project,
        ENV_PROJECT: project,
        ENV_WORKTREE_PATH: worktree,
        ENV_WORKTREE: worktree,
    }


def with_action_name(env: TaskEnv, action_name: str) -> dict[str, str | None]:
    return {**env, ENV_ACTION_NAME: action_name, ENV_ACTION: action_name}


def process_environment(env: TaskEnv, base: Mapping[str, str]) -> dict[str, str]:
    """Overlay ``env`` on ``base``; ``None`` values are removed from the result."""
    merged = dict(base)
    for name, value in env.items():
        if value is None:
            merged.pop(name, None)
        else:
            merged[name] = value
    return merged
