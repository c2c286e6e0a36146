"""Cleanup step: delete the merged working branch."""

from __future__ import annotations

from dataclasses import replace
from typing import Literal

from geeto.core.errors import GeetoError
from geeto.core.prompter import Choice
from geeto.core.result import Err, Ok, Result
from geeto.git.branch_names import is_protected_branch
from geeto.git.safe_checkout import safe_checkout
from geeto.workflow.context import WorkflowContext
from geeto.workflow.state import Step, WorkflowState, advance

UnmergedAction = Literal["force", "keep"]


def _force_delete(ctx: WorkflowContext, branch: str) -> bool:
    action = ctx.prompter.choose(
        f"'{branch}' is not fully merged",
        [
            Choice[UnmergedAction](value="force", label="Force delete", detail="git branch -D"),
            Choice[UnmergedAction](value="keep", label="Keep the branch"),
        ],
    )
    if action != "force":
        return False
    if not ctx.prompter.confirm(f"Delete '{branch}' and its unmerged commits for good?"):
        return False
    forced = ctx.repo.git("branch", "-D", branch)
    if isinstance(forced, Err):
        ctx.console.warning(f"Could not delete '{branch}': {forced.error.output}")
        return False
    return True


def run_cleanup(ctx: WorkflowContext, state: WorkflowState) -> Result[WorkflowState, GeetoError]:
    repo = ctx.repo
    console = ctx.console
    console.header("Cleanup")
    working = state.working_branch

    if not working or not state.target_branch:
        console.info("Nothing to clean up")
        return Ok(advance(state, Step.CLEANUP))
    if is_protected_branch(working):
        console.info(f"'{working}' is a protected branch, keeping it")
        return Ok(advance(state, Step.CLEANUP))

    if not ctx.prompter.confirm(f"Delete branch '{working}'?"):
        back = safe_checkout(repo, working, prompter=ctx.prompter, console=console)
        if back.success:
            state = replace(state, current_branch=working)
            console.info(f"Switched back to '{working}'")
        else:
            console.warning(f"Could not switch back to '{working}': {back.error}")
        return Ok(advance(state, Step.CLEANUP))

    deleted = repo.git("branch", "-d", working)
    if isinstance(deleted, Err):
        if "not fully merged" not in deleted.error.output:
            console.warning(f"Could not delete '{working}': {deleted.error.output}")
            return Ok(advance(state, Step.CLEANUP))
        if not _force_delete(ctx, working):
            console.info(f"Kept '{working}'")
            return Ok(advance(state, Step.CLEANUP))
    console.success(f"Deleted local branch '{working}'")

    remote = repo.git("push", "origin", "--delete", working)
    if isinstance(remote, Err):
        console.warning(f"Remote branch '{working}' was not deleted: {remote.error.output}")
    else:
        console.success(f"Deleted remote branch 'origin/{working}'")

    return Ok(advance(state, Step.CLEANUP))
