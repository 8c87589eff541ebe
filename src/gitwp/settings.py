"""Environment-derived settings for git-wp."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_BARE_REPO_DIRNAME = "bare.git"
DEFAULT_WORKTREES_DIRNAME = "."


@dataclass(frozen=True)
class Settings:
    """Workspace layout knobs read once at startup."""

    bare_repo_dirname: str = DEFAULT_BARE_REPO_DIRNAME
    worktrees_dirname: str = DEFAULT_WORKTREES_DIRNAME
    main_branch: str | None = None
    term_program: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        return cls(
            bare_repo_dirname=env.get("GIT_WP_BARE_REPO_NAME") or DEFAULT_BARE_REPO_DIRNAME,
            worktrees_dirname=env.get("GIT_WP_WORKTREES_DIR") or DEFAULT_WORKTREES_DIRNAME,
            main_branch=env.get("GIT_WP_MAIN_BRANCH") or None,
            term_program=env.get("TERM_PROGRAM") or None,
        )
