"""Workflow state: the furthest completed step plus the session choices."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import IntEnum

from geeto.ai.providers.base import AISelection, ProviderChoice

__all__ = [
    "Step",
    "WorkflowState",
    "advance",
    "new_state",
    "now_timestamp",
    "pending_steps",
    "reset",
    "selection_of",
    "step_name",
    "with_selection",
]


class Step(IntEnum):
    """Workflow steps in execution order. The value is persisted."""

    INIT = 0
    STAGED = 1
    BRANCH_CREATED = 2
    COMMITTED = 3
    PUSHED = 4
    MERGED = 5
    CLEANUP = 6


_STEP_NAMES: dict[Step, str] = {
    Step.INIT: "Initial",
    Step.STAGED: "Staging completed",
    Step.BRANCH_CREATED: "Branch created",
    Step.COMMITTED: "Commit completed",
    Step.PUSHED: "Push completed",
    Step.MERGED: "Merge completed",
    Step.CLEANUP: "Cleanup",
}


def step_name(step: Step) -> str:
    return _STEP_NAMES[step]


def now_timestamp() -> str:
    return datetime.now(tz=UTC).isoformat()


@dataclass(frozen=True, slots=True)
class WorkflowState:
    """Persisted progress of one workflow run.

    Only the model field matching ``ai_provider`` is ever set; use
    ``with_selection`` to change the provider.
    """

    step: Step = Step.INIT
    working_branch: str = ""
    target_branch: str = ""
    current_branch: str = ""
    ai_provider: ProviderChoice = "manual"
    copilot_model: str | None = None
    openrouter_model: str | None = None
    gemini_model: str | None = None
    timestamp: str = ""
    skipped_commit: bool = False
    skipped_push: bool = False


def new_state(*, current_branch: str = "", selection: AISelection | None = None) -> WorkflowState:
    state = WorkflowState(current_branch=current_branch, timestamp=now_timestamp())
    return with_selection(state, selection) if selection is not None else state


def advance(state: WorkflowState, completed: Step) -> WorkflowState:
    """Record ``completed`` as the furthest completed step.

    Raises:
        ValueError: If ``completed`` is below the current step; only
            ``reset`` may move the workflow backwards.
    """
    if completed < state.step:
        raise ValueError(
            f"cannot move workflow back from {state.step.name} to {completed.name}"
        )
    return replace(state, step=completed, timestamp=now_timestamp())


def reset(state: WorkflowState, *, current_branch: str | None = None) -> WorkflowState:
    """Back to INIT, keeping only the provider selection."""
    return replace(
        state,
        step=Step.INIT,
        working_branch="",
        target_branch="",
        current_branch=state.current_branch if current_branch is None else current_branch,
        skipped_commit=False,
        skipped_push=False,
        timestamp=now_timestamp(),
    )


def pending_steps(state: WorkflowState) -> list[Step]:
    return [step for step in Step if step > state.step]


def selection_of(state: WorkflowState) -> AISelection:
    match state.ai_provider:
        case "copilot":
            return AISelection(provider="copilot", model=state.copilot_model)
        case "openrouter":
            return AISelection(provider="openrouter", model=state.openrouter_model)
        case "gemini":
            return AISelection(provider="gemini", model=state.gemini_model)
        case _:
            return AISelection(provider="manual")


def with_selection(state: WorkflowState, selection: AISelection) -> WorkflowState:
    """Store ``selection``, clearing the model fields of other providers."""
    model = None if selection.is_manual else selection.model
    return replace(
        state,
        ai_provider=selection.provider,
        copilot_model=model if selection.provider == "copilot" else None,
        openrouter_model=model if selection.provider == "openrouter" else None,
        gemini_model=model if selection.provider == "gemini" else None,
    )
