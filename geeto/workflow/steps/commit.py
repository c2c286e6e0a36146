"""Commit step."""

from __future__ import annotations

from dataclasses import replace
from typing import Literal

from geeto.core.errors import GeetoError, cancelled
from geeto.core.prompter import Choice
from geeto.core.result import Err, Ok, Result
from geeto.git.operation import print_file_list
from geeto.workflow.context import WorkflowContext
from geeto.workflow.state import Step, WorkflowState, advance
from geeto.workflow.steps.common import commit_with_message


def run_commit(ctx: WorkflowContext, state: WorkflowState) -> Result[WorkflowState, GeetoError]:
    if state.skipped_commit:
        return Ok(advance(state, Step.COMMITTED))

    ctx.console.header("Commit")
    # The index may have changed since staging; trust only git.
    staged = ctx.repo.staged_files()
    if not staged:
        action = ctx.prompter.choose(
            "Nothing is staged",
            [Choice[Literal["skip"]](value="skip", label="Skip commit")],
        )
        if action is None:
            return Err(cancelled())
        return Ok(advance(replace(state, skipped_commit=True), Step.COMMITTED))

    print_file_list(ctx.console, staged)
    committed = commit_with_message(ctx, state)
    if isinstance(committed, Err):
        return committed
    return Ok(advance(committed.value, Step.COMMITTED))
