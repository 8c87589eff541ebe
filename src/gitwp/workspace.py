"""Workspace lifecycle: bare repository, per-branch worktrees, config files."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from gitwp.config.loader import CONFIG_FILENAME, DEFAULT_CONFIG, config_path_for
from gitwp.errors import WorkspaceError
from gitwp.git.exec import run_git
from gitwp.git.worktrees import (
    PROJECT_NAME_KEY,
    branch_exists,
    find_worktree_by_branch,
    full_branch_name,
    list_worktrees,
    merged_branches,
    retrieve_bare_repo_path,
    retrieve_current_branch,
    retrieve_main_branch,
    retrieve_project_name,
)
from gitwp.settings import Settings
from gitwp.tabs import open_tab
from gitwp.ui import Reporter


def init_workspace(
    project_name: str,
    *,
    root: Path,
    settings: Settings,
    reporter: Reporter,
) -> Path:
    """Turn ``root`` into a workspace and return the main worktree path.

    Files already present in ``root`` are moved into the main worktree.
    """
    root = root.resolve()
    main_branch = retrieve_main_branch(settings, root)
    bare_dirname = settings.bare_repo_dirname
    worktrees_dirname = settings.worktrees_dirname

    if worktrees_dirname == bare_dirname:
        raise WorkspaceError(
            f"Worktrees directory cannot be the same as the bare repo ({bare_dirname})"
        )

    # an empty directory needs no checks
    existing = sorted(root.iterdir())
    if existing:
        if (root / ".git").exists():
            raise WorkspaceError("Directory is already a git repository")
        if (root / bare_dirname).is_dir():
            raise WorkspaceError(f"Directory {bare_dirname} already exists")
        if worktrees_dirname != "." and (root / worktrees_dirname).is_dir():
            raise WorkspaceError(f"Directory {worktrees_dirname} already exists")

    bare_path = root / bare_dirname
    worktrees_path = (root / worktrees_dirname).resolve()
    main_path = worktrees_path / main_branch

    def _make_dirs() -> None:
        bare_path.mkdir(parents=True, exist_ok=True)
        worktrees_path.mkdir(parents=True, exist_ok=True)

    reporter.step("Creating base directories...")
    reporter.progress("Creating base directories", _make_dirs)

    def _init_bare() -> None:
        run_git(["init", "--bare"], cwd=bare_path)
        run_git(["config", PROJECT_NAME_KEY, project_name], cwd=bare_path)

    reporter.step("Initializing workspace...")
    reporter.progress("Initializing workspace", _init_bare)

    def _first_commit() -> None:
        empty_tree = run_git(["hash-object", "-t", "tree", "-w", "--stdin"], cwd=bare_path, input="")
        commit = run_git(["commit-tree", empty_tree.output, "-m", "init"], cwd=bare_path)
        run_git(["branch", main_branch, commit.output], cwd=bare_path)

    reporter.step("Creating first commit...")
    reporter.progress("Creating first commit", _first_commit)

    reporter.step("Creating worktree for main branch...")
    reporter.progress(
        "Creating worktree for main branch",
        lambda: run_git(["worktree", "add", str(main_path), main_branch], cwd=bare_path),
    )

    init_config(main_path, reporter=reporter)

    if existing:

        def _move_existing() -> None:
            for entry in existing:
                entry.rename(main_path / entry.name)

        reporter.step("Moving existing files into main worktree...")
        reporter.progress("Moving existing files", _move_existing)

    return main_path


def create_worktree(
    current_worktree: Path,
    branch: str,
    *,
    settings: Settings,
    reporter: Reporter,
    nocheck: bool = False,
) -> Path:
    """Add a worktree for ``branch`` next to the main worktree."""
    entries = list_worktrees(current_worktree)
    if not nocheck and find_worktree_by_branch(branch, entries) is not None:
        raise WorkspaceError(f"Worktree for {branch} already exists")

    main_branch = retrieve_main_branch(settings, current_worktree)
    main_worktree = find_worktree_by_branch(main_branch, entries)
    if main_worktree is None:
        raise WorkspaceError(f"Main branch {main_branch} not found")

    worktree = Path(main_worktree).parent / branch

    def _add() -> None:
        if branch_exists(branch, current_worktree):
            run_git(["worktree", "add", str(worktree), branch], cwd=current_worktree)
        else:
            run_git(["worktree", "add", "-b", branch, str(worktree)], cwd=current_worktree)

    reporter.step(f"Creating worktree for {branch}...")
    reporter.progress(f"Creating worktree for {branch}", _add)

    source_config = config_path_for(current_worktree)
    if source_config.is_file():
        reporter.step(f"Copying {CONFIG_FILENAME}...")
        reporter.progress(
            f"Copying {CONFIG_FILENAME}",
            lambda: shutil.copyfile(source_config, config_path_for(worktree)),
        )

    return worktree


def open_worktree(
    current_worktree: Path,
    branch: str,
    *,
    settings: Settings,
    reporter: Reporter,
) -> Path:
    """Open a tab on ``branch``'s worktree, creating the worktree when missing."""
    existing = find_worktree_by_branch(branch, list_worktrees(current_worktree))
    if existing is None:
        worktree = create_worktree(
            current_worktree, branch, settings=settings, reporter=reporter, nocheck=True
        )
    else:
        worktree = Path(existing)

    open_tab(
        worktree,
        branch,
        project_name=retrieve_project_name(current_worktree),
        settings=settings,
    )
    return worktree


def delete_worktree(
    worktree: Path,
    main_worktree: Path | None,
    *,
    reporter: Reporter,
    force: bool = False,
    delete_branch: bool = False,
    force_delete_branch: bool = False,
) -> None:
    """Remove ``worktree`` and optionally its branch.

    Non-forced branch deletion requires the branch to be merged into the
    main worktree's HEAD.
    """
    resolved = worktree.resolve()
    entries = list_worktrees(resolved if resolved.exists() else main_worktree)
    if not any(Path(entry.path).resolve() == resolved for entry in entries):
        raise WorkspaceError(f"Worktree {worktree} not found")

    removing_branch = delete_branch or force_delete_branch
    branch = retrieve_current_branch(resolved) if removing_branch else None
    if main_worktree is not None and branch and delete_branch and not force_delete_branch:
        if full_branch_name(branch) not in merged_branches(main_worktree):
            raise WorkspaceError(f"Branch {branch} is not fully merged")

    cwd = main_worktree if main_worktree is not None else Path(retrieve_bare_repo_path(resolved))
    os.chdir(cwd)

    def _remove() -> None:
        remove_args = ["worktree", "remove"]
        if force:
            remove_args.append("--force")
        run_git([*remove_args, str(resolved)], cwd=cwd)
        if branch and removing_branch:
            run_git(["branch", "-D" if force_delete_branch else "-d", branch], cwd=cwd)

    reporter.step("Deleting worktree", f"{resolved}...")
    reporter.progress(f"Deleting worktree {resolved}", _remove)


def init_config(worktree: Path, *, reporter: Reporter, force: bool = False) -> Path:
    """Write the default configuration into ``worktree``."""
    target = config_path_for(worktree)
    if not force and target.exists():
        raise WorkspaceError(f"Config file already exists at {target}")

    reporter.step(f"Creating default {CONFIG_FILENAME}...")
    reporter.progress(
        f"Creating default {CONFIG_FILENAME}",
        lambda: target.write_text(DEFAULT_CONFIG, encoding="utf-8"),
    )
    return target


def copy_config(worktree: Path, *, source: Path, reporter: Reporter, force: bool = False) -> Path:
    """Copy ``source``'s configuration file into ``worktree``."""
    target = config_path_for(worktree)
    if not force and target.exists():
        raise WorkspaceError(f"Config file already exists at {target}")
    origin = config_path_for(source)
    if not origin.is_file():
        raise WorkspaceError(f"Config file not found at {origin}")

    reporter.step("Copying config", f"from {source}...")
    reporter.progress("Copying config", lambda: shutil.copyfile(origin, target))
    return target
