"""Recursive action execution.

An action is a sequence of tasks run strictly in order. Action tasks
recurse into another configured action; shell tasks spawn an interpreter
in the foreground. A failing task either stops its action (the default)
or, with ``stop_on_error: false``, is reported and skipped. Failures travel
back up the call tree as ``TaskFailure`` values so every ancestor applies
its own task's policy.
"""

from __future__ import annotations

import dataclasses
import os

from gitwp.actions.context import (
    ExecutionContext,
    TaskEnv,
    build_environment,
    process_environment,
    with_action_name,
)
from gitwp.actions.outcome import ActionOutcome, TaskFailure
from gitwp.actions.shell import run_shell
from gitwp.config.types import ActionTask, ShellTask, Task
from gitwp.errors import ActionNotFound, TaskExecutionFailure, UnknownTaskType


def execute_action(context: ExecutionContext) -> ActionOutcome:
    """Run ``context.action_name`` and every task it references.

    Raises:
        ActionNotFound: the action (or a referenced one) is not configured.
        UnknownTaskType: a task is not one of the canonical variants.
    """
    action = context.config.get(context.action_name)
    if action is None:
        raise ActionNotFound(context.action_name, context.worktree)

    silent = context.silent if context.silent is not None else bool(action.silent)
    if not silent:
        _announce(context)

    if context.nested and context.env is not None:
        env = with_action_name(context.env, context.action_name)
    else:
        env = build_environment(
            context.workspace_info,
            action_name=context.action_name,
            worktree=context.worktree,
        )
        if context.worktree is not None:
            os.chdir(context.worktree)

    reporter = context.reporter
    suppressed: list[TaskFailure] = []
    for index, task in enumerate(action.tasks):
        failure = _run_task(context, env, index, task)
        if failure is None:
            continue
        if task.stop_on_error is False:
            reporter.blank()
            reporter.warn(f"Ignored error happening while performing task #{index}", failure.detail)
            suppressed.append(failure)
            continue
        return ActionOutcome(context.action_name, failure=failure, suppressed=tuple(suppressed))

    return ActionOutcome(context.action_name, suppressed=tuple(suppressed))


def run_action(context: ExecutionContext) -> ActionOutcome:
    """Like ``execute_action`` but raise ``TaskExecutionFailure`` on a propagated failure."""
    outcome = execute_action(context)
    if outcome.failure is not None:
        raise TaskExecutionFailure(outcome.failure)
    return outcome


def _announce(context: ExecutionContext) -> None:
    header = f'Performing action "{context.action_name}"'
    if context.nested:
        context.reporter.blank()
        context.reporter.note(header)
    else:
        context.reporter.step(header, f"on worktree {context.worktree}...")


def _run_task(context: ExecutionContext, env: TaskEnv, index: int, task: Task) -> TaskFailure | None:
    if isinstance(task, ActionTask):
        nested = execute_action(
            dataclasses.replace(
                context,
                action_name=task.action,
                args=task.args if task.args is not None else context.args,
                env=env,
                nested=True,
                silent=task.silent,
            )
        )
        if nested.failure is None:
            return None
        return TaskFailure(
            action_name=context.action_name,
            index=index,
            detail=f'action "{task.action}" failed: {nested.failure.detail}',
            returncode=nested.failure.returncode,
            cause=nested.failure,
        )

    if isinstance(task, ShellTask):
        try:
            returncode = run_shell(
                task.shell,
                task.script,
                context.args,
                env=process_environment(env, os.environ),
            )
        except OSError as exc:
            return TaskFailure(
                action_name=context.action_name,
                index=index,
                detail=f"could not start {task.shell.value}: {exc}",
            )
        if returncode == 0:
            return None
        return TaskFailure(
            action_name=context.action_name,
            index=index,
            detail=f"{task.shell.value} exited with code {returncode}",
            returncode=returncode,
        )

    raise UnknownTaskType(task)
