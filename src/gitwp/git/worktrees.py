"""Worktree plumbing over ``git worktree``, ``git branch`` and ``git config``."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from gitwp.errors import GitError
from gitwp.git.exec import run_git
from gitwp.settings import Settings

DEFAULT_MAIN_BRANCH = "main"
PROJECT_NAME_KEY = "workspace.project-name"
_BRANCH_PREFIX = "refs/heads/"


@dataclass(frozen=True)
class WorktreeEntry:
    """One record of ``git worktree list --porcelain``."""

    path: str
    head: str | None = None
    branch: str | None = None
    bare: bool = False
    detached: bool = False


def full_branch_name(branch: str) -> str:
    return f"{_BRANCH_PREFIX}{branch.removeprefix(_BRANCH_PREFIX)}"


def parse_worktree_porcelain(output: str) -> list[WorktreeEntry]:
    """Parse porcelain listing output into entries."""
    entries: list[WorktreeEntry] = []
    current: dict[str, str | bool] = {}

    def flush() -> None:
        if not current:
            return
        if "worktree" not in current:
            raise GitError(f"Worktree record without path: {current}")
        entries.append(
            WorktreeEntry(
                path=str(current["worktree"]),
                head=current.get("HEAD") or None,  # type: ignore[arg-type]
                branch=current.get("branch") or None,  # type: ignore[arg-type]
                bare=bool(current.get("bare", False)),
                detached=bool(current.get("detached", False)),
            )
        )
        current.clear()

    for line in output.splitlines():
        if not line.strip():
            flush()
            continue

        field_name, _, value = line.partition(" ")
        if field_name in ("worktree", "HEAD", "branch"):
            current[field_name] = value
        elif field_name in ("bare", "detached"):
            current[field_name] = True
        elif field_name in ("locked", "prunable"):
            continue
        else:
            raise GitError(f"Unknown field from git worktree list: {line}")
    flush()

    return entries


def list_worktrees(cwd: Path | None = None) -> list[WorktreeEntry]:
    output = run_git(["worktree", "list", "--porcelain"], cwd=cwd).stdout
    return parse_worktree_porcelain(output)


def find_worktree_by_branch(branch: str, entries: list[WorktreeEntry]) -> str | None:
    """Return the path of the non-bare, attached worktree checked out on ``branch``."""
    fullname = full_branch_name(branch)
    for entry in entries:
        if not entry.bare and not entry.detached and entry.branch == fullname:
            return entry.path
    return None


def retrieve_main_branch(settings: Settings, cwd: Path | None = None) -> str:
    """Main branch: GIT_WP_MAIN_BRANCH, else init.defaultBranch, else ``main``."""
    if settings.main_branch:
        return settings.main_branch
    configured = run_git(["config", "init.defaultBranch"], cwd=cwd, check=False).output
    return configured or DEFAULT_MAIN_BRANCH


def retrieve_worktree(branch: str, cwd: Path | None = None) -> str | None:
    return find_worktree_by_branch(branch, list_worktrees(cwd))


def retrieve_main_worktree(settings: Settings, cwd: Path | None = None) -> str | None:
    return retrieve_worktree(retrieve_main_branch(settings, cwd), cwd)


def retrieve_current_branch(worktree: Path | str | None = None) -> str:
    """Current branch of ``worktree``, including the branch being rebased."""
    cwd = Path(worktree) if worktree is not None else None
    git_dir = Path(run_git(["rev-parse", "--absolute-git-dir"], cwd=cwd).output)
    for state_dir in ("rebase-merge", "rebase-apply"):
        head_name = git_dir / state_dir / "head-name"
        if head_name.exists():
            return head_name.read_text(encoding="utf-8").strip().removeprefix(_BRANCH_PREFIX)
    return run_git(["branch", "--show-current"], cwd=cwd).output


def retrieve_current_worktree(cwd: Path | None = None) -> str:
    return run_git(["rev-parse", "--show-toplevel"], cwd=cwd).output


def retrieve_bare_repo_path(cwd: Path | None = None) -> str:
    return run_git(
        ["rev-parse", "--path-format=absolute", "--git-common-dir"], cwd=cwd
    ).output


def retrieve_project_name(cwd: Path | None = None) -> str | None:
    name = run_git(["config", PROJECT_NAME_KEY], cwd=cwd, check=False).output
    return name or None


def branch_exists(branch: str, cwd: Path | None = None) -> bool:
    result = run_git(["branch", "--list", branch], cwd=cwd, check=False)
    return bool(result.output)


def merged_branches(cwd: Path) -> list[str]:
    """Full ref names of local branches merged into ``cwd``'s HEAD."""
    output = run_git(["branch", "--list", "--format", "%(refname)", "--merged"], cwd=cwd).stdout
    return [line.strip() for line in output.splitlines() if line.strip()]


@dataclass(frozen=True)
class GitWorkspaceInfo:
    """Answers the action engine's workspace queries from git."""

    settings: Settings = field(default_factory=Settings)
    cwd: Path | None = None

    def current_branch(self, worktree: str | None = None) -> str:
        return retrieve_current_branch(worktree if worktree is not None else self.cwd)

    def project_name(self) -> str | None:
        return retrieve_project_name(self.cwd)

    def bare_repo_path(self) -> str:
        return retrieve_bare_repo_path(self.cwd)

    def main_worktree_path(self) -> str | None:
        return retrieve_main_worktree(self.settings, self.cwd)
