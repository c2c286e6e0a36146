"""Checkout that never drops uncommitted work silently.

A plain checkout is tried first. When local changes block it, a three-way
``checkout -m`` carries them over; if that is impossible the user picks
stash, commit first, force (confirmed twice) or cancel.
"""

from __future__ import annotations

from typing import Literal

from geeto.core.prompter import Choice, Prompter
from geeto.core.result import Err, Ok, Result
from geeto.git.operation import (
    LOCAL_CHANGES,
    GitOperationResult,
    abort_merge_state,
    mentions,
    print_file_list,
)
from geeto.git.repository import Repository
from geeto.output.console import ConsoleProtocol
from geeto.platform.process import ProcessError

__all__ = ["CHECKOUT_STASH_MESSAGE", "safe_checkout"]

CHECKOUT_STASH_MESSAGE = "Geeto auto-stash before checkout"

ChangesAction = Literal["stash", "commit", "force", "cancel"]
ConflictAction = Literal["resolve", "abort"]


def _describe_failure(branch: str, output: str) -> str:
    if "did not match any file(s) known to git" in output:
        return f"Branch '{branch}' does not exist"
    if "already exists" in output:
        return f"Branch '{branch}' already exists"
    return output or f"git checkout {branch} failed"


def _finish(branch: str, result: Result[str, ProcessError]) -> GitOperationResult:
    match result:
        case Ok(_):
            return GitOperationResult.ok()
        case Err(e):
            return GitOperationResult.failed(_describe_failure(branch, e.output))


def _after_three_way(
    repo: Repository,
    branch: str,
    *,
    prompter: Prompter,
    console: ConsoleProtocol,
) -> GitOperationResult:
    conflicts = repo.conflicted_files()
    if not conflicts:
        console.success(f"Switched to '{branch}' carrying your local changes")
        return GitOperationResult.ok()

    console.warning(f"Carrying local changes onto '{branch}' produced conflicts")
    print_file_list(console, conflicts)
    action = prompter.choose(
        "Checkout conflicts",
        [
            Choice[ConflictAction](
                value="resolve",
                label="Resolve manually",
                detail=f"stay on {branch} with conflict markers",
            ),
            Choice[ConflictAction](value="abort", label="Abort", detail="undo the checkout merge"),
        ],
    )
    if action == "resolve":
        console.info("Fix the conflict markers, then 'git add' the files")
        return GitOperationResult.ok()

    if not abort_merge_state(repo):
        console.error("Could not restore the previous state; run 'git reset --merge' manually")
    return GitOperationResult.conflicted("Checkout aborted due to conflicts")


def _handle_local_changes(
    repo: Repository,
    branch: str,
    *,
    prompter: Prompter,
    console: ConsoleProtocol,
) -> GitOperationResult:
    files = repo.changed_files()
    console.warning(f"You have uncommitted changes that block switching to '{branch}'")
    print_file_list(console, files)

    while True:
        action = prompter.choose(
            "Uncommitted changes",
            [
                Choice[ChangesAction](
                    value="stash", label="Stash changes", detail="git stash, restore later"
                ),
                Choice[ChangesAction](
                    value="commit", label="Commit first", detail="run the commit step, then retry"
                ),
                Choice[ChangesAction](
                    value="force", label="Force checkout", detail="DISCARD uncommitted changes"
                ),
                Choice[ChangesAction](value="cancel", label="Cancel"),
            ],
        )

        match action:
            case "stash":
                stashed = repo.stash_push(CHECKOUT_STASH_MESSAGE)
                if isinstance(stashed, Err):
                    return GitOperationResult.failed(f"Stash failed: {stashed.error.message}")
                console.info("Changes stashed; restore them later with 'git stash pop'")
                return _finish(branch, repo.git("checkout", branch))
            case "commit":
                return GitOperationResult.needs_commit()
            case "force":
                discard = prompter.confirm(
                    f"Discard all uncommitted changes and switch to '{branch}'? "
                    "This cannot be undone."
                )
                if discard:
                    return _finish(branch, repo.git("checkout", "-f", branch))
                console.info("Force checkout not confirmed")
            case _:
                return GitOperationResult.user_cancelled("Checkout cancelled by user")


def safe_checkout(
    repo: Repository,
    branch: str,
    *,
    prompter: Prompter,
    console: ConsoleProtocol,
    create: bool = False,
    force: bool = False,
) -> GitOperationResult:
    """Switch to ``branch`` (creating it with ``create``).

    ``force`` discards local changes and must only be passed after the
    caller obtained an explicit confirmation.
    """
    if create:
        return _finish(branch, repo.git("checkout", "-b", branch))
    if force:
        return _finish(branch, repo.git("checkout", "-f", branch))

    plain = repo.git("checkout", branch)
    if isinstance(plain, Ok):
        return GitOperationResult.ok()

    output = plain.error.output
    if not mentions(output, LOCAL_CHANGES):
        return GitOperationResult.failed(_describe_failure(branch, output))

    if isinstance(repo.git("checkout", "-m", branch), Ok):
        return _after_three_way(repo, branch, prompter=prompter, console=console)

    return _handle_local_changes(repo, branch, prompter=prompter, console=console)
