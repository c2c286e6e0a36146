"""User prompt abstraction.

Safe git operations and the AI loops ask the user questions through the
``Prompter`` protocol so they can run against a real terminal or against a
scripted answer queue in tests.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Literal, Protocol, TypeVar

__all__ = [
    "Choice",
    "Prompter",
    "PromptRecord",
    "ScriptedPrompter",
]

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Choice[T]:
    """One selectable entry in a menu."""

    value: T
    label: str
    detail: str | None = None


class Prompter(Protocol):
    """Protocol for interactive questions."""

    def choose(
        self,
        title: str,
        choices: Sequence[Choice[T]],
        *,
        subtitle: str | None = None,
        initial_index: int = 0,
    ) -> T | None:
        """Ask the user to pick one entry.

        Returns:
            The chosen value, or None if the user cancelled.
        """
        ...

    def confirm(self, prompt: str) -> bool:
        """Ask a yes/no question."""
        ...

    def text(self, prompt: str, *, default: str = "") -> str | None:
        """Ask for free text. None means the user cancelled."""
        ...


@dataclass(frozen=True, slots=True)
class PromptRecord:
    kind: Literal["choose", "confirm", "text"]
    title: str
    offered: tuple[object, ...] = ()


class ScriptedPrompter:
    """Prompter that replays queued answers, for tests.

    ``choose`` answers must be one of the offered values (or None to
    cancel), ``confirm`` answers are bools and ``text`` answers are strings
    (or None). Running out of answers fails the test loudly.
    """

    def __init__(self, answers: Iterable[object] = ()) -> None:
        self.answers: deque[object] = deque(answers)
        self.records: list[PromptRecord] = []

    def _next(self, title: str) -> object:
        if not self.answers:
            raise AssertionError(f"unexpected prompt: {title!r}")
        return self.answers.popleft()

    def choose(
        self,
        title: str,
        choices: Sequence[Choice[T]],
        *,
        subtitle: str | None = None,
        initial_index: int = 0,
    ) -> T | None:
        offered = tuple(c.value for c in choices)
        self.records.append(PromptRecord(kind="choose", title=title, offered=offered))
        answer = self._next(title)
        if answer is None:
            return None
        for choice in choices:
            if choice.value == answer:
                return choice.value
        raise AssertionError(f"answer {answer!r} not offered for {title!r}: {offered!r}")

    def confirm(self, prompt: str) -> bool:
        self.records.append(PromptRecord(kind="confirm", title=prompt))
        answer = self._next(prompt)
        if not isinstance(answer, bool):
            raise AssertionError(f"confirm {prompt!r} expects a bool, got {answer!r}")
        return answer

    def text(self, prompt: str, *, default: str = "") -> str | None:
        self.records.append(PromptRecord(kind="text", title=prompt))
        answer = self._next(prompt)
        if answer is not None and not isinstance(answer, str):
            raise AssertionError(f"text {prompt!r} expects a str, got {answer!r}")
        return answer

    # Test helpers

    @property
    def titles(self) -> list[str]:
        return [r.title for r in self.records]

    def offered_for(self, title: str) -> tuple[object, ...]:
        """Values offered by the most recent menu with this title."""
        for record in reversed(self.records):
            if record.kind == "choose" and record.title == title:
                return record.offered
        raise AssertionError(f"no menu titled {title!r}")

    @property
    def exhausted(self) -> bool:
        return not self.answers
