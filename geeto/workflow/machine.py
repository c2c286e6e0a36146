"""Resumable workflow runner.

The checkpoint records the furthest completed step. On start the runner
decides between resume and fresh start, then dispatches the lowest
incomplete step through the generic state machine, checkpointing after
every step so an interrupted run picks up where it stopped.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Literal

from geeto.ai.providers.base import AISelection
from geeto.ai.providers.registry import display_name
from geeto.core import fsm
from geeto.core.errors import GeetoError, cancelled
from geeto.core.prompter import Choice
from geeto.core.result import Err, Ok, Result
from geeto.workflow.context import WorkflowContext
from geeto.workflow.state import (
    Step,
    WorkflowState,
    new_state,
    reset,
    selection_of,
    step_name,
)
from geeto.workflow.steps import (
    run_branch,
    run_cleanup,
    run_commit,
    run_merge,
    run_push,
    run_stage,
)

__all__ = ["START_AT_STEPS", "RunOptions", "StartAt", "choose_ai_provider", "run_workflow"]

StartAt = Literal["stage", "branch", "commit", "push", "merge", "cleanup"]
ResumeAction = Literal["resume", "fresh"]

# Starting at a step means every step before it counts as done.
START_AT_STEPS: dict[StartAt, Step] = {
    "stage": Step.INIT,
    "branch": Step.STAGED,
    "commit": Step.BRANCH_CREATED,
    "push": Step.COMMITTED,
    "merge": Step.PUSHED,
    "cleanup": Step.MERGED,
}

# Completed step -> name of the handler that runs next.
_NEXT_STEP: dict[Step, str] = {
    Step.INIT: "stage",
    Step.STAGED: "branch",
    Step.BRANCH_CREATED: "commit",
    Step.COMMITTED: "push",
    Step.PUSHED: "merge",
    Step.MERGED: "cleanup",
}


@dataclass(frozen=True, slots=True)
class RunOptions:
    start_at: StartAt | None = None
    fresh: bool = False
    resume: bool = False
    stage_all: bool = False


def choose_ai_provider(
    ctx: WorkflowContext, current: AISelection | None = None
) -> Result[AISelection, GeetoError]:
    """Ask which provider generates names and messages ("manual" skips AI)."""
    ids = ctx.registry.ids()
    choices: list[Choice[str]] = [Choice(value=p, label=display_name(p, ctx.registry)) for p in ids]
    choices.append(Choice(value="manual", label="Manual", detail="no AI, type everything"))
    values = [c.value for c in choices]
    initial = values.index(current.provider) if current and current.provider in values else 0

    picked = ctx.prompter.choose("AI provider", choices, initial_index=initial)
    if picked is None:
        return Err(cancelled())
    for provider_id in ids:
        if provider_id == picked:
            return Ok(ctx.registry.default_selection(provider_id))
    return Ok(AISelection(provider="manual"))


def _starting_state(
    ctx: WorkflowContext, options: RunOptions
) -> Result[WorkflowState, GeetoError]:
    live = ctx.repo.current_branch() or ""
    saved = ctx.store.load()

    if saved is None:
        selection = choose_ai_provider(ctx)
        if isinstance(selection, Err):
            return selection
        return Ok(new_state(current_branch=live, selection=selection.value))

    if options.fresh or saved.step in (Step.INIT, Step.CLEANUP):
        return Ok(reset(saved, current_branch=live))

    if not options.resume:
        where = saved.working_branch or saved.current_branch or "?"
        ctx.console.info(
            f"Found a saved workflow on '{where}': {step_name(saved.step)} ({saved.timestamp})"
        )
        action = ctx.prompter.choose(
            "Resume previous workflow?",
            [
                Choice[ResumeAction](
                    value="resume", label=f"Resume from {_NEXT_STEP[saved.step]}"
                ),
                Choice[ResumeAction](value="fresh", label="Start fresh"),
            ],
        )
        if action is None:
            return Err(cancelled())
        if action == "fresh":
            return Ok(reset(saved, current_branch=live))

    if saved.current_branch and live and saved.current_branch != live:
        ctx.console.warning(
            f"The saved workflow was on '{saved.current_branch}' but you are on '{live}'; "
            "starting over"
        )
        return Ok(reset(saved, current_branch=live))
    return Ok(saved)


def _report_done(ctx: WorkflowContext, state: WorkflowState) -> None:
    for step in Step:
        if step == Step.INIT or step > state.step:
            continue
        if step == Step.COMMITTED and state.skipped_commit:
            continue
        if step == Step.PUSHED and state.skipped_push:
            continue
        ctx.console.print(f"  {step_name(step)}: already done")


def run_workflow(
    ctx: WorkflowContext, options: RunOptions = RunOptions()
) -> Result[WorkflowState, GeetoError]:
    """Run the workflow from the first incomplete step to cleanup.

    Returns:
        Ok(final state), or the Err that stopped the run. The checkpoint
        always holds the last completed step.
    """
    started = _starting_state(ctx, options)
    if isinstance(started, Err):
        return started
    state = started.value

    if options.start_at is not None:
        step = START_AT_STEPS[options.start_at]
        # Steps that will run again must not inherit an earlier skip.
        state = replace(
            state,
            step=step,
            skipped_commit=state.skipped_commit and step >= Step.COMMITTED,
            skipped_push=state.skipped_push and step >= Step.PUSHED,
        )
        ctx.console.info(f"Starting at {options.start_at}")

    _report_done(ctx, state)
    ctx.save(state)

    def step_handler(
        run: Callable[[WorkflowContext, WorkflowState], Result[WorkflowState, GeetoError]],
    ) -> fsm.StepHandler[WorkflowState]:
        def handler(s: WorkflowState) -> Result[fsm.StepOutcome[WorkflowState], GeetoError]:
            result = run(ctx, s)
            if isinstance(result, Err):
                return result
            done = result.value
            return Ok(fsm.finish(done) if done.step == Step.CLEANUP else fsm.advance(done))

        return handler

    def stage(c: WorkflowContext, s: WorkflowState) -> Result[WorkflowState, GeetoError]:
        return run_stage(c, s, stage_all=options.stage_all)

    finished = fsm.run_state_machine(
        initial_state=state,
        get_step=lambda s: _NEXT_STEP.get(s.step, "done"),
        handlers={
            "stage": step_handler(stage),
            "branch": step_handler(run_branch),
            "commit": step_handler(run_commit),
            "push": step_handler(run_push),
            "merge": step_handler(run_merge),
            "cleanup": step_handler(run_cleanup),
        },
        save_state=ctx.save,
    )
    if isinstance(finished, Err):
        return finished

    final = finished.value
    live = ctx.repo.current_branch() or final.current_branch
    cleared = ctx.store.reset_preserving_provider(replace(final, current_branch=live))
    if isinstance(cleared, Err):
        ctx.console.warning(cleared.error.message)
    provider = display_name(selection_of(final).provider, ctx.registry)
    ctx.console.success(f"Workflow complete (AI provider: {provider})")
    return Ok(final)
