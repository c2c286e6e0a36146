"""Helpers shared by the step handlers."""

from __future__ import annotations

from geeto.core.errors import GeetoError, cancelled
from geeto.core.result import Err, Ok, Result
from geeto.git.operation import GitOperationResult
from geeto.git.safe_commit import safe_commit
from geeto.workflow.context import WorkflowContext
from geeto.workflow.state import WorkflowState


def operation_error(result: GitOperationResult, fallback: str) -> GeetoError:
    message = result.error or fallback
    if result.cancelled:
        return cancelled(message)
    if result.conflict:
        return GeetoError(
            kind="git_conflict",
            message=message,
            hint="resolve the conflict, then run geeto again to continue",
        )
    return GeetoError(kind="git_failed", message=message)


def diff_context(ctx: WorkflowContext) -> str:
    """Text handed to the AI: the staged diff, else the changed file names."""
    diff = ctx.repo.staged_diff()
    if diff.strip():
        return diff
    return "\n".join(ctx.repo.staged_files() or ctx.repo.changed_files())


def commit_with_message(
    ctx: WorkflowContext, state: WorkflowState
) -> Result[WorkflowState, GeetoError]:
    """Run the commit message loop, then commit."""
    suggested = ctx.suggest(state, "commit", diff_context(ctx))
    if isinstance(suggested, Err):
        return suggested
    suggestion, state = suggested.value

    result = safe_commit(ctx.repo, suggestion.value, prompter=ctx.prompter, console=ctx.console)
    if not result.success:
        return Err(operation_error(result, "git commit failed"))
    ctx.console.success("Changes committed")
    return Ok(state)
