"""Tests for configuration loading, validation and normalization."""

from __future__ import annotations

from pathlib import Path

import pytest

from gitwp.config import CONFIG_FILENAME, DEFAULT_CONFIG, load_config_text, read_config
from gitwp.config.loader import normalize_task
from gitwp.config.types import ActionTask, Check, Shell, ShellTask
from gitwp.errors import ConfigError


def test_default_config_is_valid() -> None:
    config = load_config_text(DEFAULT_CONFIG)

    assert list(config) == ["action1", "action2", "action3", "env", "tab:title"]
    assert config["action1"].tasks == (
        ActionTask(action="action2"),
        ActionTask(action="action3", args=("--foo",)),
    )
    assert config["action3"].tasks[0].stop_on_error is False
    assert config["tab:title"].silent is True


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ({"type": "action", "action": "x"}, ActionTask(action="x")),
        ({"action": "x", "args": ["a", "b"]}, ActionTask(action="x", args=("a", "b"))),
        ({"action": "x", "args": "--foo 'two words'"}, ActionTask(action="x", args=("--foo", "two words"))),
        ({"type": "shell", "shell": "nushell", "script": "ls"}, ShellTask(shell=Shell.NUSHELL, script="ls")),
        ({"type": "bash", "script": "ls", "silent": True}, ShellTask(shell=Shell.BASH, script="ls", silent=True)),
        ({"type": "nushell", "script": "ls"}, ShellTask(shell=Shell.NUSHELL, script="ls")),
        ({"bash": "ls", "stop_on_error": False}, ShellTask(shell=Shell.BASH, script="ls", stop_on_error=False)),
        ({"nushell": "ls"}, ShellTask(shell=Shell.NUSHELL, script="ls")),
    ],
)
def test_task_shapes_normalize(raw: dict[str, object], expected: object) -> None:
    assert normalize_task(raw) == expected


def test_checks_are_parsed() -> None:
    config = load_config_text(
        """
        deploy:
          checks:
            main: not_local
          tasks: []
        """
    )

    assert dict(config["deploy"].checks) == {"main": Check.NOT_LOCAL}


@pytest.mark.parametrize(
    ("content", "fragment"),
    [
        ("build:\n  silent: true\n", "'tasks' is a required property"),
        ("build:\n  tasks:\n    - run: echo\n", "build.tasks.0"),
        ("build:\n  tasks:\n    - type: shell\n      shell: zsh\n      script: ls\n", "build.tasks.0"),
        ("build:\n  tasks: []\n  extra: 1\n", "Additional properties"),
        ("- just\n- a list\n", "is not of type 'object'"),
    ],
)
def test_invalid_config_is_rejected(content: str, fragment: str) -> None:
    with pytest.raises(ConfigError) as excinfo:
        load_config_text(content, source="wp.config.yml")

    message = str(excinfo.value)
    assert message.startswith("Invalid configuration in wp.config.yml:")
    assert fragment in message


def test_malformed_yaml_is_config_error() -> None:
    with pytest.raises(ConfigError, match="Malformed YAML"):
        load_config_text("build: [unclosed\n")


def test_empty_document_is_empty_config() -> None:
    assert dict(load_config_text("")) == {}


def test_read_config_from_worktree_directory(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("hello:\n  tasks:\n    - bash: echo hi\n", encoding="utf-8")

    config = read_config(dir=tmp_path)

    assert config["hello"].tasks == (ShellTask(shell=Shell.BASH, script="echo hi"),)


def test_read_config_missing_file_is_empty(tmp_path: Path) -> None:
    assert dict(read_config(dir=tmp_path)) == {}
    assert dict(read_config(path=tmp_path / "nope.yml")) == {}


def test_read_config_prefers_literal_content(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("from_file:\n  tasks: []\n", encoding="utf-8")

    config = read_config(content="from_text:\n  tasks: []\n", dir=tmp_path)

    assert list(config) == ["from_text"]


def test_loaded_config_is_read_only() -> None:
    config = load_config_text("a:\n  tasks: []\n")

    with pytest.raises(TypeError):
        config["b"] = config["a"]  # type: ignore[index]
