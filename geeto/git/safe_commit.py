"""Commit with merge, empty-index and hook handling."""

from __future__ import annotations

from typing import Literal

from geeto.core.prompter import Choice, Prompter
from geeto.core.result import Err, Ok
from geeto.git.operation import HOOK_FAILURE, GitOperationResult, mentions
from geeto.git.repository import Repository
from geeto.output.console import ConsoleProtocol, Style

__all__ = ["safe_commit"]

EmptyIndexAction = Literal["stage_all", "cancel"]


def _commit_args(message: str, *, amend: bool, no_verify: bool) -> list[str]:
    args = ["commit"]
    if message.strip():
        args += ["-m", message]
    else:
        args.append("--no-edit")
    if amend:
        args.append("--amend")
    if no_verify:
        args.append("--no-verify")
    return args


def safe_commit(
    repo: Repository,
    message: str,
    *,
    prompter: Prompter,
    console: ConsoleProtocol,
    amend: bool = False,
    no_verify: bool = False,
) -> GitOperationResult:
    """Create a commit with ``message``.

    An in-progress merge is concluded without requiring staged files (an
    empty message keeps git's merge message). An empty index offers to stage
    everything first. A failing pre-commit hook offers one retry with
    ``--no-verify``.
    """
    if not repo.is_merge_in_progress() and not amend and not repo.staged_files():
        console.warning("No staged changes to commit")
        action = prompter.choose(
            "Nothing staged",
            [
                Choice[EmptyIndexAction](
                    value="stage_all", label="Stage all and commit", detail="git add -A"
                ),
                Choice[EmptyIndexAction](value="cancel", label="Cancel"),
            ],
        )
        if action != "stage_all":
            return GitOperationResult.user_cancelled("Commit cancelled by user")
        added = repo.git("add", "-A")
        if isinstance(added, Err):
            return GitOperationResult.failed(f"git add failed: {added.error.output}")
        if not repo.staged_files():
            return GitOperationResult.failed("Nothing to commit, working tree clean")

    result = repo.git(*_commit_args(message, amend=amend, no_verify=no_verify))
    if isinstance(result, Ok):
        return GitOperationResult.ok()

    output = result.error.output
    if mentions(output, HOOK_FAILURE) and not no_verify:
        console.error("Commit hook failed")
        console.print(output, Style.DIM)
        if prompter.confirm("Retry the commit skipping hooks (--no-verify)?"):
            return safe_commit(
                repo,
                message,
                prompter=prompter,
                console=console,
                amend=amend,
                no_verify=True,
            )
        return GitOperationResult.user_cancelled("Commit cancelled after hook failure")

    return GitOperationResult.failed(output or "git commit failed")
