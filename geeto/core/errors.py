"""Error kinds and process exit codes.

``GeetoError`` is the single error value carried by ``Err`` across the
workflow. ``ErrorCode`` values are the shell exit codes of the ``geeto``
command and should remain stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Literal

__all__ = ["ErrorCode", "ErrorKind", "GeetoError", "cancelled", "exit_code_for"]


class ErrorCode(IntEnum):
    """Exit codes for the CLI.

    - 0: Success (also used when the user cancels)
    - 1: User error (bad flags, invalid branch name)
    - 2: Git error (command failed, unresolved conflict)
    - 5: I/O error (checkpoint or repository inaccessible)

    AI provider failures never end a run (manual input is always offered),
    so they have no code of their own.
    """

    OK = 0
    USER_ERROR = 1
    GIT_ERROR = 2
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")


ErrorKind = Literal[
    "cancelled",
    "invalid_input",
    "validation",
    "git_failed",
    "git_conflict",
    "io_failed",
]


@dataclass(frozen=True, slots=True)
class GeetoError:
    """Error value for workflow operations.

    Attributes:
        kind: Category used for exit code mapping
        message: One-line description shown to the user
        hint: Optional follow-up suggestion
    """

    kind: ErrorKind
    message: str
    hint: str | None = None

    @property
    def is_cancelled(self) -> bool:
        return self.kind == "cancelled"


def cancelled(message: str = "cancelled by user") -> GeetoError:
    return GeetoError(kind="cancelled", message=message)


def exit_code_for(error: GeetoError) -> ErrorCode:
    """Map an error kind to the process exit code."""
    match error.kind:
        case "cancelled":
            return ErrorCode.OK
        case "invalid_input" | "validation":
            return ErrorCode.USER_ERROR
        case "git_failed" | "git_conflict":
            return ErrorCode.GIT_ERROR
        case "io_failed":
            return ErrorCode.IO_ERROR
