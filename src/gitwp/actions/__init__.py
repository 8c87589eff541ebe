"""Action execution engine."""

from gitwp.actions.context import ExecutionContext, WorkspaceInfo, build_environment
from gitwp.actions.engine import execute_action, run_action
from gitwp.actions.outcome import ActionOutcome, TaskFailure

__all__ = [
    "ActionOutcome",
    "ExecutionContext",
    "TaskFailure",
    "WorkspaceInfo",
    "build_environment",
    "execute_action",
    "run_action",
]
