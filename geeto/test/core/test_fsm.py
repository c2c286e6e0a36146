"""Tests for the generic state machine runner."""

from __future__ import annotations

from dataclasses import dataclass, replace

from geeto.core.errors import GeetoError
from geeto.core.fsm import StepOutcome, advance, finish, run_state_machine
from geeto.core.result import Err, Ok, Result


@dataclass(frozen=True, slots=True)
class Counter:
    step: str
    count: int = 0


def _inc(s: Counter) -> Result[StepOutcome[Counter], GeetoError]:
    nxt = replace(s, count=s.count + 1)
    if nxt.count >= 3:
        return Ok(advance(replace(nxt, step="done")))
    return Ok(advance(nxt))


def _done(s: Counter) -> Result[StepOutcome[Counter], GeetoError]:
    return Ok(finish(s))


def test_runs_until_finish_and_saves_every_advance() -> None:
    saved: list[Counter] = []

    def save(s: Counter) -> Result[Counter, GeetoError]:
        saved.append(s)
        return Ok(s)

    result = run_state_machine(
        initial_state=Counter(step="inc"),
        get_step=lambda s: s.step,
        handlers={"inc": _inc, "done": _done},
        save_state=save,
    )

    assert result == Ok(Counter(step="done", count=3))
    assert [s.count for s in saved] == [1, 2, 3]


def test_finish_is_not_saved() -> None:
    saved: list[Counter] = []

    def save(s: Counter) -> Result[Counter, GeetoError]:
        saved.append(s)
        return Ok(s)

    run_state_machine(
        initial_state=Counter(step="done"),
        get_step=lambda s: s.step,
        handlers={"done": _done},
        save_state=save,
    )
    assert saved == []


def test_handler_error_stops_the_machine() -> None:
    calls: list[str] = []

    def boom(s: Counter) -> Result[StepOutcome[Counter], GeetoError]:
        calls.append("boom")
        return Err(GeetoError(kind="git_failed", message="boom"))

    result = run_state_machine(
        initial_state=Counter(step="boom"),
        get_step=lambda s: s.step,
        handlers={"boom": boom, "done": _done},
    )
    assert isinstance(result, Err)
    assert result.error.message == "boom"
    assert calls == ["boom"]


def test_save_error_stops_the_machine() -> None:
    def save(s: Counter) -> Result[Counter, GeetoError]:
        return Err(GeetoError(kind="io_failed", message="disk full"))

    result = run_state_machine(
        initial_state=Counter(step="inc"),
        get_step=lambda s: s.step,
        handlers={"inc": _inc, "done": _done},
        save_state=save,
    )
    assert isinstance(result, Err)
    assert result.error.kind == "io_failed"


def test_unknown_step_is_invalid_input() -> None:
    result = run_state_machine(
        initial_state=Counter(step="nowhere"),
        get_step=lambda s: s.step,
        handlers={"done": _done},
    )
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_input"
    assert result.error.message == "unknown step: nowhere"
