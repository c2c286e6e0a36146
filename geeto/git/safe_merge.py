"""Merge with pre-checks and an interactive conflict menu."""

from __future__ import annotations

from typing import Literal

from geeto.core.prompter import Choice, Prompter
from geeto.core.result import Err
from geeto.git.operation import (
    MERGE_CONFLICT,
    GitOperationResult,
    abort_merge_state,
    mentions,
    print_file_list,
)
from geeto.git.repository import Repository
from geeto.output.console import ConsoleProtocol, Style

__all__ = ["resolve_merge_conflicts", "resolve_rebase_conflicts", "safe_merge"]

ConflictAction = Literal["abort", "manual"]


def resolve_merge_conflicts(
    repo: Repository,
    *,
    prompter: Prompter,
    console: ConsoleProtocol,
) -> GitOperationResult:
    """Ask how to handle a conflicted merge or pull.

    Cancelling the menu counts as abort: the repository is never left
    half-merged without the user asking for it.
    """
    files = repo.unmerged_files() or repo.conflicted_files()
    console.warning("Merge conflicts detected")
    if files:
        print_file_list(console, files)

    action = prompter.choose(
        "Merge conflicts",
        [
            Choice[ConflictAction](
                value="abort", label="Abort merge", detail="restore the previous state"
            ),
            Choice[ConflictAction](
                value="manual", label="Resolve manually", detail="keep the conflicted state"
            ),
        ],
    )

    if action == "manual":
        console.info("Resolve the conflicts, then run:")
        console.print("  git add <resolved files>", Style.BOLD)
        console.print("  git commit", Style.BOLD)
        console.print("or give up with:", Style.DIM)
        console.print("  git merge --abort", Style.BOLD)
        return GitOperationResult.conflicted("Merge conflict - manual resolution needed")

    if abort_merge_state(repo):
        console.info("Merge aborted, previous state restored")
    else:
        console.error("Could not abort the merge; run 'git merge --abort' manually")
    return GitOperationResult.conflicted("Merge conflict - aborted by user")


def resolve_rebase_conflicts(
    repo: Repository,
    *,
    prompter: Prompter,
    console: ConsoleProtocol,
) -> GitOperationResult:
    """Ask how to handle a rebase stopped on conflicts. Cancelling aborts it."""
    files = repo.unmerged_files() or repo.conflicted_files()
    console.warning("Rebase stopped on conflicts")
    if files:
        print_file_list(console, files)

    action = prompter.choose(
        "Rebase conflicts",
        [
            Choice[ConflictAction](
                value="abort", label="Abort rebase", detail="restore the previous state"
            ),
            Choice[ConflictAction](
                value="manual", label="Resolve manually", detail="keep the conflicted state"
            ),
        ],
    )

    if action == "manual":
        console.info("Resolve the conflicts, then run:")
        console.print("  git add <resolved files>", Style.BOLD)
        console.print("  git rebase --continue", Style.BOLD)
        console.print("or give up with:", Style.DIM)
        console.print("  git rebase --abort", Style.BOLD)
        return GitOperationResult.conflicted("Rebase conflict - manual resolution needed")

    if isinstance(repo.git("rebase", "--abort"), Err):
        console.error("Could not abort the rebase; run 'git rebase --abort' manually")
    else:
        console.info("Rebase aborted, previous state restored")
    return GitOperationResult.conflicted("Rebase conflict - aborted by user")


def safe_merge(
    repo: Repository,
    source: str,
    *,
    prompter: Prompter,
    console: ConsoleProtocol,
    no_ff: bool = False,
    squash: bool = False,
) -> GitOperationResult:
    """Merge ``source`` into the current branch.

    Refuses to start while another merge or a rebase is in progress.
    """
    if repo.is_merge_in_progress():
        return GitOperationResult.failed(
            "A merge is already in progress; finish it with 'git commit' "
            "or run 'git merge --abort'"
        )
    if repo.is_rebase_in_progress():
        return GitOperationResult.failed(
            "A rebase is in progress; finish it with 'git rebase --continue' "
            "or run 'git rebase --abort'"
        )

    args = ["merge", source]
    if no_ff:
        args.append("--no-ff")
    if squash:
        args.append("--squash")
    args.append("--no-edit")

    result = repo.git(*args)
    if not isinstance(result, Err):
        if not squash and repo.is_merge_in_progress():
            return resolve_merge_conflicts(repo, prompter=prompter, console=console)
        return GitOperationResult.ok()

    output = result.error.output
    if mentions(output, MERGE_CONFLICT) or repo.is_merge_in_progress():
        return resolve_merge_conflicts(repo, prompter=prompter, console=console)
    return GitOperationResult.failed(output or f"git merge {source} failed")
