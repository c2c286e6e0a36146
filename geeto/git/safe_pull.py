"""Pull with auto-stash and conflict handling."""

from __future__ import annotations

from typing import Literal

from geeto.core.prompter import Choice, Prompter
from geeto.core.result import Err
from geeto.git.operation import (
    AUTH_FAILURE,
    MERGE_CONFLICT,
    NETWORK_FAILURE,
    GitOperationResult,
    mentions,
    print_file_list,
)
from geeto.git.repository import Repository
from geeto.git.safe_merge import resolve_merge_conflicts
from geeto.output.console import ConsoleProtocol

__all__ = ["PULL_STASH_MESSAGE", "safe_pull"]

PULL_STASH_MESSAGE = "Geeto auto-stash before pull"

DirtyAction = Literal["stash", "cancel"]


def safe_pull(
    repo: Repository,
    *,
    prompter: Prompter,
    console: ConsoleProtocol,
    remote: str = "origin",
    branch: str | None = None,
) -> GitOperationResult:
    """Pull ``branch`` from ``remote`` without losing local changes.

    Local changes are stashed only with the user's consent, and restoring
    them afterwards is offered rather than forced.
    """
    stashed = False
    if repo.has_uncommitted_changes():
        console.warning("You have uncommitted changes")
        print_file_list(console, repo.changed_files())
        action = prompter.choose(
            "Uncommitted changes before pull",
            [
                Choice[DirtyAction](value="stash", label="Stash and pull", detail="git stash"),
                Choice[DirtyAction](value="cancel", label="Cancel"),
            ],
        )
        if action != "stash":
            return GitOperationResult.user_cancelled("Pull cancelled by user")
        pushed = repo.stash_push(PULL_STASH_MESSAGE)
        if isinstance(pushed, Err):
            return GitOperationResult.failed(f"Stash failed: {pushed.error.message}")
        stashed = True

    args = ["pull", remote] + ([branch] if branch else [])
    result = repo.git(*args)
    if isinstance(result, Err):
        output = result.error.output
        if mentions(output, MERGE_CONFLICT) or repo.is_merge_in_progress():
            outcome = resolve_merge_conflicts(repo, prompter=prompter, console=console)
            if stashed:
                console.info("Your local changes are still stashed ('git stash list')")
            return outcome
        if mentions(output, NETWORK_FAILURE):
            return GitOperationResult.failed(f"Network error: {output}")
        if mentions(output, AUTH_FAILURE):
            return GitOperationResult.failed(f"Authentication failed: {output}")
        return GitOperationResult.failed(output or "git pull failed")

    console.success(f"Pulled from {remote}" + (f"/{branch}" if branch else ""))

    if stashed and repo.stash_has(PULL_STASH_MESSAGE):
        if prompter.confirm("Restore your stashed changes (git stash pop)?"):
            popped = repo.git("stash", "pop")
            if isinstance(popped, Err):
                console.warning("Stash could not be applied cleanly; it is kept in 'git stash list'")
                return GitOperationResult.conflicted(popped.error.output or "git stash pop failed")
            console.success("Stashed changes restored")
        else:
            console.info("Your changes remain in the stash ('git stash pop' to restore)")

    return GitOperationResult.ok()
