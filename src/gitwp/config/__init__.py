"""Worktree action configuration: model and loader."""

from gitwp.config.loader import (
    CONFIG_FILENAME,
    DEFAULT_CONFIG,
    config_path_for,
    load_config_text,
    normalize_task,
    read_config,
)
from gitwp.config.types import Action, ActionTask, Check, Config, Shell, ShellTask, Task

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG",
    "Action",
    "ActionTask",
    "Check",
    "Config",
    "Shell",
    "ShellTask",
    "Task",
    "config_path_for",
    "load_config_text",
    "normalize_task",
    "read_config",
]
