"""Branch step: reuse the current branch or create a named one."""

from __future__ import annotations

from dataclasses import replace
from typing import Literal

from geeto.core.errors import GeetoError, cancelled
from geeto.core.prompter import Choice
from geeto.core.result import Err, Ok, Result
from geeto.git.branch_names import branch_prefix, is_protected_branch, recommended_separator
from geeto.git.safe_checkout import safe_checkout
from geeto.workflow.context import WorkflowContext
from geeto.workflow.state import Step, WorkflowState, advance
from geeto.workflow.steps.common import diff_context, operation_error

BranchAction = Literal["current", "create"]


def run_branch(ctx: WorkflowContext, state: WorkflowState) -> Result[WorkflowState, GeetoError]:
    repo = ctx.repo
    ctx.console.header("Branch")
    current = repo.current_branch() or ""

    if current and not is_protected_branch(current):
        action = ctx.prompter.choose(
            f"You are on '{current}'",
            [
                Choice[BranchAction](value="current", label=f"Use current branch '{current}'"),
                Choice[BranchAction](value="create", label="Create a new branch"),
            ],
        )
        if action is None:
            return Err(cancelled())
        if action == "current":
            return Ok(
                advance(
                    replace(state, working_branch=current, current_branch=current),
                    Step.BRANCH_CREATED,
                )
            )
    elif current:
        ctx.console.info(f"'{current}' is protected, a new branch is required")

    prefix = branch_prefix(current, recommended_separator(repo.local_branches()))
    context = diff_context(ctx)
    while True:
        suggested = ctx.suggest(state, "branch", context, prefix=prefix)
        if isinstance(suggested, Err):
            return suggested
        suggestion, state = suggested.value
        name = suggestion.value
        if not repo.branch_exists(name):
            break
        ctx.console.error(f"Branch '{name}' already exists, pick another name")

    result = safe_checkout(
        repo, name, prompter=ctx.prompter, console=ctx.console, create=True
    )
    if not result.success:
        return Err(operation_error(result, f"could not create branch '{name}'"))

    ctx.console.success(f"Created and switched to '{name}'")
    return Ok(
        advance(replace(state, working_branch=name, current_branch=name), Step.BRANCH_CREATED)
    )
