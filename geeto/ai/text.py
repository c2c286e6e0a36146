"""Cleaning and validation of generated commit text."""

from __future__ import annotations

import re

from geeto.core.errors import GeetoError
from geeto.core.result import Err, Ok, Result

__all__ = [
    "COMMIT_TYPES",
    "MAX_COMMIT_TITLE_LENGTH",
    "extract_commit_title",
    "format_commit_message",
    "is_conventional_line",
    "normalize_ai_output",
    "strip_decorations",
    "validate_commit_message",
]

COMMIT_TYPES: tuple[tuple[str, str], ...] = (
    ("feat", "A new feature"),
    ("fix", "A bug fix"),
    ("docs", "Documentation only changes"),
    ("style", "Formatting, missing semicolons, etc."),
    ("refactor", "Code change that neither fixes a bug nor adds a feature"),
    ("test", "Adding or correcting tests"),
    ("chore", "Build process or auxiliary tools"),
    ("perf", "Performance improvement"),
    ("ci", "CI configuration changes"),
    ("build", "Build system or dependency changes"),
    ("revert", "Revert a previous commit"),
)

MAX_COMMIT_TITLE_LENGTH = 100

_TYPE_NAMES = "|".join(name for name, _ in COMMIT_TYPES)
_CONVENTIONAL = re.compile(rf"^({_TYPE_NAMES})(\([^()\s][^()]*\))?!?: \S")
_TYPE_START = re.compile(rf"\b({_TYPE_NAMES})(\(|!?:)")
_FENCE = re.compile(r"^```[\w-]*\s*$", re.MULTILINE)


def strip_decorations(raw: str) -> str:
    """Remove code fences, backticks and wrapping quotes."""
    text = _FENCE.sub("", raw).replace("`", "").strip()
    while len(text) >= 2 and text[0] == text[-1] and text[0] in {'"', "'"}:
        text = text[1:-1].strip()
    return text


def normalize_ai_output(raw: str) -> str:
    """Clean generated commit text and drop any preamble before the type.

    "Sure! Here it is: feat(api): add x" becomes "feat(api): add x".
    """
    text = strip_decorations(raw)
    match = _TYPE_START.search(text)
    if match is not None:
        text = text[match.start() :]
    return text.strip().strip("\"'").strip()


def extract_commit_title(message: str) -> str:
    for line in message.splitlines():
        if line.strip():
            return line.strip()
    return ""


def is_conventional_line(line: str) -> bool:
    return bool(_CONVENTIONAL.match(line.strip()))


def validate_commit_message(message: str) -> Result[str, GeetoError]:
    """Accept a conventional commit whose title fits in 100 characters."""
    title = extract_commit_title(message)
    if not title:
        return Err(GeetoError(kind="validation", message="Commit message cannot be empty"))
    if not is_conventional_line(title):
        return Err(
            GeetoError(
                kind="validation",
                message="Commit title must follow 'type(scope): description'",
                hint=f"types: {', '.join(name for name, _ in COMMIT_TYPES)}",
            )
        )
    if len(title) > MAX_COMMIT_TITLE_LENGTH:
        return Err(
            GeetoError(
                kind="validation",
                message=f"Commit title is longer than {MAX_COMMIT_TITLE_LENGTH} characters",
            )
        )
    return Ok(message.strip())


def format_commit_message(commit_type: str, scope: str | None, description: str) -> str:
    scope_part = f"({scope.strip()})" if scope and scope.strip() else ""
    return f"{commit_type}{scope_part}: {description.strip()}"
