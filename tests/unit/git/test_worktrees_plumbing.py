"""Tests for worktree listing and branch lookups."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from gitwp.errors import GitError
from gitwp.git.exec import ExecError, ExecResult, run_git
from gitwp.git.worktrees import (
    WorktreeEntry,
    find_worktree_by_branch,
    full_branch_name,
    list_worktrees,
    parse_worktree_porcelain,
    retrieve_current_branch,
    retrieve_main_branch,
    retrieve_project_name,
)
from gitwp.settings import Settings

PORCELAIN = """\
worktree /ws/bare.git
bare

worktree /ws/main
HEAD 1111111111111111111111111111111111111111
branch refs/heads/main

worktree /ws/feature/x
HEAD 2222222222222222222222222222222222222222
branch refs/heads/feature/x
locked

worktree /ws/detached
HEAD 3333333333333333333333333333333333333333
detached
prunable gitdir file points to non-existent location
"""


def _git(cwd: Path, *args: str) -> str:
    result = subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True)
    return result.stdout.strip()


class _GitStub:
    def __init__(self, outputs: dict[tuple[str, ...], ExecResult]):
        self.outputs = outputs
        self.calls: list[tuple[str, ...]] = []

    def __call__(self, args: list[str], *, cwd: Path | None = None, check: bool = True) -> ExecResult:
        _ = (cwd, check)
        key = tuple(args)
        self.calls.append(key)
        if key not in self.outputs:
            raise AssertionError(f"missing stub for args: {args}")
        return self.outputs[key]


def _result(args: list[str], stdout: str = "", code: int = 0) -> ExecResult:
    return ExecResult(argv=tuple(["git", *args]), cwd=Path("/ws"), returncode=code, stdout=stdout, stderr="")


def test_porcelain_records_are_parsed() -> None:
    entries = parse_worktree_porcelain(PORCELAIN)

    assert entries == [
        WorktreeEntry(path="/ws/bare.git", bare=True),
        WorktreeEntry(path="/ws/main", head="1" * 40, branch="refs/heads/main"),
        WorktreeEntry(path="/ws/feature/x", head="2" * 40, branch="refs/heads/feature/x"),
        WorktreeEntry(path="/ws/detached", head="3" * 40, detached=True),
    ]


def test_porcelain_unknown_field_is_rejected() -> None:
    with pytest.raises(GitError, match="Unknown field"):
        parse_worktree_porcelain("worktree /ws/main\nmystery value\n")


def test_porcelain_record_without_path_is_rejected() -> None:
    with pytest.raises(GitError, match="without path"):
        parse_worktree_porcelain("HEAD abc\nbranch refs/heads/main\n")


def test_find_worktree_by_branch_skips_bare_and_detached() -> None:
    entries = parse_worktree_porcelain(PORCELAIN)

    assert find_worktree_by_branch("feature/x", entries) == "/ws/feature/x"
    assert find_worktree_by_branch("refs/heads/main", entries) == "/ws/main"
    assert find_worktree_by_branch("missing", entries) is None


def test_full_branch_name_is_idempotent() -> None:
    assert full_branch_name("dev") == "refs/heads/dev"
    assert full_branch_name("refs/heads/dev") == "refs/heads/dev"


def test_main_branch_prefers_setting(monkeypatch: pytest.MonkeyPatch) -> None:
    stub = _GitStub({})
    monkeypatch.setattr("gitwp.git.worktrees.run_git", stub)

    assert retrieve_main_branch(Settings(main_branch="trunk")) == "trunk"
    assert stub.calls == []


@pytest.mark.parametrize(("configured", "expected"), [("develop\n", "develop"), ("", "main")])
def test_main_branch_falls_back_to_git_config(
    monkeypatch: pytest.MonkeyPatch, configured: str, expected: str
) -> None:
    args = ["config", "init.defaultBranch"]
    stub = _GitStub({tuple(args): _result(args, stdout=configured, code=0 if configured else 1)})
    monkeypatch.setattr("gitwp.git.worktrees.run_git", stub)

    assert retrieve_main_branch(Settings()) == expected


def test_list_worktrees_in_real_repository(repo: Path) -> None:
    feature = repo.parent / "feature"
    _git(repo, "worktree", "add", "-b", "feature", str(feature))

    entries = list_worktrees(repo)

    assert [Path(e.path).resolve() for e in entries] == [repo.resolve(), feature.resolve()]
    assert [e.branch for e in entries] == ["refs/heads/main", "refs/heads/feature"]


def test_current_branch_reports_branch_under_rebase(repo: Path) -> None:
    _git(repo, "checkout", "-b", "topic")
    (repo / "README.md").write_text("topic\n", encoding="utf-8")
    _git(repo, "commit", "-am", "topic change")
    _git(repo, "checkout", "main")
    (repo / "README.md").write_text("main\n", encoding="utf-8")
    _git(repo, "commit", "-am", "main change")
    _git(repo, "checkout", "topic")

    assert retrieve_current_branch(repo) == "topic"

    rebase = subprocess.run(["git", "rebase", "main"], cwd=repo, capture_output=True, text=True)
    assert rebase.returncode != 0
    assert _git(repo, "branch", "--show-current") == ""
    assert retrieve_current_branch(repo) == "topic"


def test_project_name_absent_is_none(repo: Path) -> None:
    assert retrieve_project_name(repo) is None

    _git(repo, "config", "workspace.project-name", "demo")
    assert retrieve_project_name(repo) == "demo"


def test_run_git_raises_with_stderr(repo: Path) -> None:
    with pytest.raises(ExecError) as excinfo:
        run_git(["rev-parse", "--verify", "does-not-exist"], cwd=repo)

    assert excinfo.value.result.returncode != 0
    assert "rev-parse" in str(excinfo.value)


def test_exec_error_names_command_directory_and_code(repo: Path) -> None:
    with pytest.raises(ExecError) as excinfo:
        run_git(["checkout", "no-such-branch"], cwd=repo)

    result = excinfo.value.result
    assert not result.ok
    assert str(excinfo.value).startswith(f"`git checkout no-such-branch` in {repo.resolve()} exited with code")
    assert "no-such-branch" in str(excinfo.value).splitlines()[-1]


def test_exec_result_output_is_stripped(repo: Path) -> None:
    result = run_git(["branch", "--show-current"], cwd=repo)

    assert result.ok
    assert result.stdout == "main\n"
    assert result.output == "main"
