"""Load and normalize worktree action configuration files."""

from __future__ import annotations

import json
import shlex
import textwrap
from importlib.resources import files
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml  # type: ignore[import-untyped]
from jsonschema.validators import Draft202012Validator

from gitwp.config.types import Action, ActionTask, Check, Config, Shell, ShellTask, Task
from gitwp.errors import ConfigError

CONFIG_FILENAME = "wp.config.yml"
SCHEMA_NAME = "config.schema.json"

DEFAULT_CONFIG = textwrap.dedent(
    """\
    action1:
      tasks:
        - action: action2
        - type: action
          args: --foo
          action: action3

    action2:
      tasks:
        - bash: |
            echo "This is action 2, called with $*"

    action3:
      tasks:
        - type: bash
          stop_on_error: false
          script: |
            echo "This is action 3"

    env:
      tasks:
        - bash: |
            echo "GIT_WP_ACTION_NAME: $GIT_WP_ACTION_NAME"
            echo "GIT_WP_BARE_PATH: $GIT_WP_BARE_PATH"
            echo "GIT_WP_BRANCH_NAME: $GIT_WP_BRANCH_NAME"
            echo "GIT_WP_MAIN_PATH: $GIT_WP_MAIN_PATH"
            echo "GIT_WP_PROJECT_NAME: $GIT_WP_PROJECT_NAME"
            echo "GIT_WP_WORKTREE_PATH: $GIT_WP_WORKTREE_PATH"

    "tab:title":
      silent: true
      tasks:
        - bash: |
            wezterm cli set-tab-title "${GIT_WP_PROJECT_NAME}:${GIT_WP_BRANCH_NAME}"
    """
)

_LEGACY_SHELL_KEYS = ("bash", "nushell")


def _load_schema() -> dict[str, Any]:
    text = files("gitwp.schemas").joinpath(SCHEMA_NAME).read_text(encoding="utf-8")
    return json.loads(text)


def validate_raw_config(data: Any, *, source: str = "<config>") -> None:
    """Validate a parsed YAML document against the bundled schema.

    Raises:
        ConfigError: listing every violation as ``path: message``.
    """
    validator = Draft202012Validator(_load_schema())
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
    if not errors:
        return

    messages = [
        f"{'.'.join(str(p) for p in e.path)}: {e.message}" if e.path else e.message
        for e in errors
    ]
    raise ConfigError(
        f"Invalid configuration in {source}:\n" + "\n".join(f"  - {msg}" for msg in messages)
    )


def _normalize_args(raw: str | list[str] | None) -> tuple[str, ...] | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        return tuple(shlex.split(raw))
    return tuple(raw)


def normalize_task(raw: dict[str, Any]) -> Task:
    """Turn any accepted task shape into ``ActionTask`` or ``ShellTask``."""
    stop_on_error = raw.get("stop_on_error")
    silent = raw.get("silent")
    task_type = raw.get("type")

    if task_type == "action" or (task_type is None and "action" in raw):
        return ActionTask(
            action=raw["action"],
            args=_normalize_args(raw.get("args")),
            stop_on_error=stop_on_error,
            silent=silent,
        )
    if task_type == "shell":
        return ShellTask(
            shell=Shell(raw["shell"]),
            script=raw["script"],
            stop_on_error=stop_on_error,
            silent=silent,
        )
    if task_type in _LEGACY_SHELL_KEYS:
        return ShellTask(
            shell=Shell(task_type),
            script=raw["script"],
            stop_on_error=stop_on_error,
            silent=silent,
        )
    for key in _LEGACY_SHELL_KEYS:
        if task_type is None and key in raw:
            return ShellTask(
                shell=Shell(key),
                script=raw[key],
                stop_on_error=stop_on_error,
                silent=silent,
            )
    raise ConfigError(f"Unrecognized task shape: {json.dumps(raw, sort_keys=True, default=str)}")


def build_config(data: dict[str, Any]) -> Config:
    """Build the read-only configuration mapping from a validated document."""
    actions: dict[str, Action] = {}
    for name, raw_action in data.items():
        checks = {key: Check(value) for key, value in (raw_action.get("checks") or {}).items()}
        actions[str(name)] = Action(
            tasks=tuple(normalize_task(task) for task in raw_action.get("tasks") or []),
            silent=raw_action.get("silent"),
            checks=MappingProxyType(checks),
        )
    return MappingProxyType(actions)


def load_config_text(content: str, *, source: str = "<config>") -> Config:
    """Parse, validate and normalize configuration text."""
    try:
        parsed = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Malformed YAML config in {source}: {exc}") from exc

    if parsed is None:
        parsed = {}
    validate_raw_config(parsed, source=source)
    return build_config(parsed)


def config_path_for(worktree: Path) -> Path:
    return worktree / CONFIG_FILENAME


def read_config(
    *,
    content: str | None = None,
    path: Path | None = None,
    dir: Path | None = None,
) -> Config:
    """Load configuration from literal text, an explicit file, or a worktree directory.

    A missing file yields an empty configuration.
    """
    if content is not None:
        return load_config_text(content)

    config_path = path or (config_path_for(dir) if dir is not None else None)
    if config_path is None or not config_path.is_file():
        return MappingProxyType({})

    return load_config_text(config_path.read_text(encoding="utf-8"), source=str(config_path))
