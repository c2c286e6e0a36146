"""Arrow-key menu for TTYs.

The menu is redrawn in place below the workflow output instead of clearing
the screen, so earlier messages (file lists, suggestions) stay visible.
"""

from __future__ import annotations

import os
import shutil
import sys
from dataclasses import dataclass
from typing import Literal, TypeVar

T = TypeVar("T")

Key = Literal["up", "down", "enter", "cancel", "other"]

_POSIX_ESCAPES: dict[str, Key] = {"A": "up", "B": "down"}
_WINDOWS_ESCAPES: dict[str, Key] = {"H": "up", "P": "down"}


@dataclass(frozen=True, slots=True)
class SelectorOption[T]:
    value: T
    label: str
    detail: str | None = None


def is_interactive_terminal() -> bool:
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _color_enabled() -> bool:
    if not is_interactive_terminal() or os.getenv("NO_COLOR") is not None:
        return False
    return os.getenv("TERM", "").lower() != "dumb"


def _paint(text: str, *codes: str) -> str:
    if not codes or not _color_enabled():
        return text
    return f"\x1b[{';'.join(codes)}m{text}\x1b[0m"


def _read_char() -> str:
    if os.name == "nt":
        import msvcrt

        return msvcrt.getwch()

    import termios
    import tty

    fd = sys.stdin.fileno()
    saved = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        return sys.stdin.read(1)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


def _read_key() -> Key:
    ch = _read_char()
    if ch in ("\r", "\n"):
        return "enter"
    if ch in ("q", "Q", "\x03"):
        return "cancel"
    if ch in ("k", "K"):
        return "up"
    if ch in ("j", "J"):
        return "down"
    if os.name == "nt" and ch in ("\x00", "\xe0"):
        return _WINDOWS_ESCAPES.get(_read_char(), "other")
    if ch == "\x1b":
        if _read_char() != "[":
            return "cancel"
        return _POSIX_ESCAPES.get(_read_char(), "other")
    return "other"


def _fit(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: max(0, width - 3)] + "..."


def _menu_lines(
    title: str, subtitle: str | None, options: list[SelectorOption[T]], index: int
) -> list[str]:
    width = max(40, shutil.get_terminal_size((100, 30)).columns - 2)
    lines = [_paint(title, "1", "96")]
    if subtitle:
        lines.append(_paint(_fit(subtitle, width), "2"))
    for i, opt in enumerate(options):
        detail = f"  ({opt.detail})" if opt.detail else ""
        text = _fit(f"{opt.label}{detail}", width - 4)
        if i == index:
            lines.append(_paint(f"> {text}", "1", "30", "46"))
        else:
            lines.append(f"  {text}")
    lines.append(_paint("Up/Down + Enter to choose, q to cancel", "2"))
    return lines


def select_one[T](
    *,
    title: str,
    options: list[SelectorOption[T]],
    subtitle: str | None = None,
    initial_index: int = 0,
) -> T | None:
    """Let the user pick one option; None means cancelled.

    Raises:
        ValueError: If ``options`` is empty.
        RuntimeError: If stdin/stdout is not a terminal.
    """
    if not options:
        raise ValueError("selector requires at least one option")
    if not is_interactive_terminal():
        raise RuntimeError("interactive selector requires a TTY")

    index = max(0, min(initial_index, len(options) - 1))
    drawn = 0
    while True:
        if drawn:
            # Move back over the previous frame and clear it.
            sys.stdout.write(f"\x1b[{drawn}F\x1b[J")
        lines = _menu_lines(title, subtitle, options, index)
        sys.stdout.write("\n".join(lines) + "\n")
        sys.stdout.flush()
        drawn = len(lines)

        match _read_key():
            case "up":
                index = (index - 1) % len(options)
            case "down":
                index = (index + 1) % len(options)
            case "enter":
                return options[index].value
            case "cancel":
                return None
            case "other":
                pass


def confirm_yn(*, prompt: str) -> bool:
    """Single-key yes/no question. Anything but 'y' is a no."""
    if not is_interactive_terminal():
        raise RuntimeError("interactive confirmation requires a TTY")

    sys.stdout.write(f"{_paint(prompt, '1', '97')} [y/N] ")
    sys.stdout.flush()
    answer = _read_char().lower()
    sys.stdout.write(("y" if answer == "y" else "n") + "\n")
    sys.stdout.flush()
    return answer == "y"
