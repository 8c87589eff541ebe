"""Type definitions for worktree action configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class Shell(str, Enum):
    """Interpreters a shell task can run under."""

    BASH = "bash"
    NUSHELL = "nushell"


class Check(str, Enum):
    """Worktree checks attached to an action (metadata only)."""

    CREATE = "create"
    LOCAL = "local"
    NOT_LOCAL = "not_local"


@dataclass(frozen=True)
class ActionTask:
    """Task invoking another configured action."""

    action: str
    args: tuple[str, ...] | None = None
    stop_on_error: bool | None = None
    silent: bool | None = None


@dataclass(frozen=True)
class ShellTask:
    """Task running a script under a shell interpreter."""

    shell: Shell
    script: str
    stop_on_error: bool | None = None
    silent: bool | None = None


Task = ActionTask | ShellTask


@dataclass(frozen=True)
class Action:
    """Named, ordered sequence of tasks."""

    tasks: tuple[Task, ...] = ()
    silent: bool | None = None
    checks: Mapping[str, Check] = field(default_factory=lambda: MappingProxyType({}))


Config = Mapping[str, Action]
