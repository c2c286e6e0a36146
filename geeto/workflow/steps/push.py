"""Push step."""

from __future__ import annotations

from dataclasses import replace

from geeto.core.errors import GeetoError
from geeto.core.result import Err, Ok, Result
from geeto.git.safe_push import safe_push
from geeto.workflow.context import WorkflowContext
from geeto.workflow.state import Step, WorkflowState, advance
from geeto.workflow.steps.common import operation_error


def run_push(ctx: WorkflowContext, state: WorkflowState) -> Result[WorkflowState, GeetoError]:
    repo = ctx.repo
    ctx.console.header("Push")
    branch = state.working_branch or repo.current_branch()
    if not branch:
        return Err(GeetoError(kind="git_failed", message="cannot determine the branch to push"))

    if not ctx.prompter.confirm(f"Push {branch} to origin?"):
        ctx.console.info("Push skipped")
        return Ok(advance(replace(state, skipped_push=True), Step.PUSHED))

    result = safe_push(
        repo,
        branch,
        prompter=ctx.prompter,
        console=ctx.console,
        set_upstream=not repo.has_upstream(),
    )
    if not result.success:
        return Err(operation_error(result, f"git push {branch} failed"))
    return Ok(advance(replace(state, skipped_push=False), Step.PUSHED))
