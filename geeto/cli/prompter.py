"""Terminal implementation of the ``Prompter`` protocol."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

import typer

from geeto.cli.selector import SelectorOption, confirm_yn, select_one
from geeto.core.prompter import Choice

T = TypeVar("T")


class TerminalPrompter:
    """Menus via the arrow-key selector, free text via ``typer.prompt``."""

    def choose(
        self,
        title: str,
        choices: Sequence[Choice[T]],
        *,
        subtitle: str | None = None,
        initial_index: int = 0,
    ) -> T | None:
        return select_one(
            title=title,
            options=[SelectorOption(value=c.value, label=c.label, detail=c.detail) for c in choices],
            subtitle=subtitle,
            initial_index=initial_index,
        )

    def confirm(self, prompt: str) -> bool:
        return confirm_yn(prompt=prompt)

    def text(self, prompt: str, *, default: str = "") -> str | None:
        try:
            value: str = typer.prompt(prompt, default=default, show_default=bool(default))
        except typer.Abort:
            return None
        return value.strip()
