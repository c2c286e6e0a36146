"""Shared pieces of the safe git operations.

Each safe operation returns a ``GitOperationResult`` rather than raising:
auth failures, rejected pushes and conflicts are expected outcomes that the
caller reports or recovers from.
"""

from __future__ import annotations

from dataclasses import dataclass

from geeto.core.result import Ok
from geeto.git.repository import Repository
from geeto.output.console import ConsoleProtocol, Style

__all__ = [
    "GitOperationResult",
    "abort_merge_state",
    "mentions",
    "print_file_list",
]

AUTH_FAILURE = (
    "authentication failed",
    "permission denied",
    "could not read from remote",
    "fatal: unable to access",
)
NETWORK_FAILURE = (
    "could not resolve host",
    "failed to connect",
    "connection timed out",
    "command timed out",
    "network is unreachable",
)
REJECTED = ("rejected", "non-fast-forward", "updates were rejected")
NO_UPSTREAM = ("no upstream branch", "has no upstream")
MERGE_CONFLICT = ("conflict", "automatic merge failed")
LOCAL_CHANGES = ("would be overwritten", "your local changes")
HOOK_FAILURE = ("pre-commit hook", "hook declined", "hook failed", "hook exited")

_MAX_LISTED_FILES = 10


@dataclass(frozen=True, slots=True)
class GitOperationResult:
    """Outcome of a safe git operation.

    Attributes:
        success: The operation completed
        conflict: The repository holds (or held) conflicting changes
        commit_needed: The caller must run a commit before retrying
        cancelled: The user backed out of a recovery menu
        error: Human readable failure description
    """

    success: bool
    conflict: bool = False
    commit_needed: bool = False
    cancelled: bool = False
    error: str | None = None

    @classmethod
    def ok(cls) -> GitOperationResult:
        return cls(success=True)

    @classmethod
    def failed(cls, error: str) -> GitOperationResult:
        return cls(success=False, error=error)

    @classmethod
    def conflicted(cls, error: str) -> GitOperationResult:
        return cls(success=False, conflict=True, error=error)

    @classmethod
    def needs_commit(cls) -> GitOperationResult:
        return cls(success=False, commit_needed=True, error="changes must be committed first")

    @classmethod
    def user_cancelled(cls, error: str) -> GitOperationResult:
        return cls(success=False, cancelled=True, error=error)


def mentions(text: str, needles: tuple[str, ...]) -> bool:
    """Case-insensitive check for any of ``needles`` in git output."""
    lowered = text.lower()
    return any(n in lowered for n in needles)


def abort_merge_state(repo: Repository) -> bool:
    """Put the working tree back to its pre-merge state.

    Tries ``merge --abort``, then ``checkout --merge --abort``, then
    ``reset --merge``. Returns False only if every attempt failed.
    """
    for args in (
        ("merge", "--abort"),
        ("checkout", "--merge", "--abort"),
        ("reset", "--merge"),
    ):
        if isinstance(repo.git(*args), Ok):
            return True
    return False


def print_file_list(console: ConsoleProtocol, files: list[str]) -> None:
    """Print at most ten paths, then a count of the rest."""
    for path in files[:_MAX_LISTED_FILES]:
        console.print(f"  - {path}", Style.DIM)
    if len(files) > _MAX_LISTED_FILES:
        console.print(f"  ... and {len(files) - _MAX_LISTED_FILES} more", Style.DIM)
