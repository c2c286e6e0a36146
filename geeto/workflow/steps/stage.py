"""Stage step: decide what goes into the commit."""

from __future__ import annotations

from dataclasses import replace
from typing import Literal

from geeto.core.errors import GeetoError, cancelled
from geeto.core.prompter import Choice
from geeto.core.result import Err, Ok, Result
from geeto.git.operation import print_file_list
from geeto.workflow.context import WorkflowContext
from geeto.workflow.state import Step, WorkflowState, advance

StageAction = Literal["stage_all", "keep", "skip"]


def _stage_all(ctx: WorkflowContext) -> Result[None, GeetoError]:
    added = ctx.repo.git_checked("add", "-A")
    if isinstance(added, Err):
        return Err(GeetoError(kind="git_failed", message=f"git add failed: {added.error.message}"))
    return Ok(None)


def run_stage(
    ctx: WorkflowContext, state: WorkflowState, *, stage_all: bool = False
) -> Result[WorkflowState, GeetoError]:
    console = ctx.console
    console.header("Stage changes")

    if stage_all:
        staged = _stage_all(ctx)
        if isinstance(staged, Err):
            return staged
    else:
        changed = ctx.repo.changed_files()
        if not changed:
            action = ctx.prompter.choose(
                "No changes found",
                [Choice(value="continue", label="Continue without changes")],
            )
            if action is None:
                return Err(cancelled())
        else:
            print_file_list(console, changed)
            already = ctx.repo.staged_files()
            choices: list[Choice[StageAction]] = [Choice(value="stage_all", label="Stage all changes")]
            if already:
                choices.append(
                    Choice(value="keep", label=f"Keep current staging ({len(already)} files)")
                )
            choices.append(Choice(value="skip", label="Continue without staging"))

            action = ctx.prompter.choose("What should be staged?", choices)
            if action is None:
                return Err(cancelled())
            if action == "stage_all":
                staged = _stage_all(ctx)
                if isinstance(staged, Err):
                    return staged

    files = ctx.repo.staged_files()
    if files:
        console.success(f"{len(files)} file(s) staged")
    else:
        console.warning("Nothing staged; the commit will be skipped")

    branch = ctx.repo.current_branch() or state.current_branch
    return Ok(
        advance(replace(state, current_branch=branch, skipped_commit=not files), Step.STAGED)
    )
