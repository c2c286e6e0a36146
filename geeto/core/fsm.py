"""Generic step-driven state machine runner.

A machine is a mapping from step names to handlers. Each handler receives
the current (immutable) state and returns either ``advance(new_state)``
to move on, ``finish(final_state)`` to stop, or an ``Err`` to abort. The
runner persists every advanced state through ``save_state`` before the next
handler runs, so a crash always resumes at a step boundary.

The workflow, the AI fallback loop and the suggestion loop all run on this.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TypeVar

from geeto.core.errors import GeetoError
from geeto.core.result import Err, Ok, Result

S = TypeVar("S")


@dataclass(frozen=True, slots=True)
class StepAdvance[S]:
    session: S


@dataclass(frozen=True, slots=True)
class StepFinish[S]:
    session: S


StepOutcome = StepAdvance[S] | StepFinish[S]
StepHandler = Callable[[S], Result[StepOutcome[S], GeetoError]]
SaveState = Callable[[S], Result[S, GeetoError]]
GetStep = Callable[[S], str]


def advance[S](session: S) -> StepAdvance[S]:
    return StepAdvance(session=session)


def finish[S](session: S) -> StepFinish[S]:
    return StepFinish(session=session)


def keep_state[S](session: S) -> Result[S, GeetoError]:
    """``save_state`` for machines whose state lives only in memory."""
    return Ok(session)


def run_state_machine[S](
    *,
    initial_state: S,
    get_step: GetStep[S],
    handlers: Mapping[str, StepHandler[S]],
    save_state: SaveState[S] = keep_state,
) -> Result[S, GeetoError]:
    """Drive ``initial_state`` through ``handlers`` until a handler finishes.

    Returns:
        Ok(final state), or the first Err from a handler or from save_state
    """
    current = initial_state
    while True:
        step = get_step(current)
        handler = handlers.get(step)
        if handler is None:
            return Err(GeetoError(kind="invalid_input", message=f"unknown step: {step}"))

        outcome = handler(current)
        if isinstance(outcome, Err):
            return outcome

        if isinstance(outcome.value, StepFinish):
            return Ok(outcome.value.session)

        current = outcome.value.session
        saved = save_state(current)
        if isinstance(saved, Err):
            return saved
        current = saved.value
