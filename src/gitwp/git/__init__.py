"""Git plumbing used by git-wp workspaces."""

from gitwp.git.exec import ExecError, ExecResult, run_command, run_git
from gitwp.git.worktrees import (
    GitWorkspaceInfo,
    WorktreeEntry,
    find_worktree_by_branch,
    full_branch_name,
    list_worktrees,
    parse_worktree_porcelain,
)

__all__ = [
    "ExecError",
    "ExecResult",
    "GitWorkspaceInfo",
    "WorktreeEntry",
    "find_worktree_by_branch",
    "full_branch_name",
    "list_worktrees",
    "parse_worktree_porcelain",
    "run_command",
    "run_git",
]
