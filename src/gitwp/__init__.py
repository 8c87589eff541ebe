"""git-wp - bare repository + per-branch worktree workspaces."""

__version__ = "0.4.0"
