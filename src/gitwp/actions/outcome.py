"""Result values returned by the action engine."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TaskFailure:
    """A failed task, identified by its position in the containing action."""

    action_name: str
    index: int
    detail: str
    returncode: int | None = None
    cause: TaskFailure | None = None

    def root(self) -> TaskFailure:
        """Innermost failure along the nested-action chain."""
        failure = self
        while failure.cause is not None:
            failure = failure.cause
        return failure


@dataclass(frozen=True)
class ActionOutcome:
    """Outcome of one action run.

    ``failure`` is the propagated failure that stopped the action, if any;
    ``suppressed`` lists failures of tasks marked ``stop_on_error: false``.
    """

    action_name: str
    failure: TaskFailure | None = None
    suppressed: tuple[TaskFailure, ...] = ()

    @property
    def ok(self) -> bool:
        return self.failure is None
