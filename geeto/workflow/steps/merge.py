"""Merge step: fold the working branch into a long-lived branch."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from typing import Literal

from geeto.core.errors import GeetoError, cancelled
from geeto.core.prompter import Choice
from geeto.core.result import Err, Ok, Result
from geeto.git.safe_checkout import safe_checkout
from geeto.git.safe_merge import safe_merge
from geeto.git.safe_push import safe_push
from geeto.workflow.context import WorkflowContext
from geeto.workflow.state import Step, WorkflowState, advance
from geeto.workflow.steps.common import commit_with_message, operation_error

__all__ = ["merge_targets", "run_merge"]

MergeMode = Literal["no_ff", "squash"]

PREFERRED_TARGETS = ("development", "develop", "dev", "main", "master")
DEVELOPMENT_BRANCH = "development"

_CREATE_DEVELOPMENT = "__create_development__"
_SKIP = "__skip__"


def merge_targets(branches: Iterable[str], working: str) -> list[str]:
    """Candidate targets: long-lived branches first, then the rest sorted.

    Feature-style names (containing '#' or '/') are never offered.
    """
    candidates = {b for b in branches if b != working and "#" not in b and "/" not in b}
    preferred = [b for b in PREFERRED_TARGETS if b in candidates]
    rest = sorted(candidates.difference(PREFERRED_TARGETS))
    return preferred + rest


def _create_development(ctx: WorkflowContext) -> Result[str, GeetoError]:
    base = next((b for b in ("main", "master") if ctx.repo.branch_exists(b)), "HEAD")
    created = ctx.repo.git_checked("branch", DEVELOPMENT_BRANCH, base)
    if isinstance(created, Err):
        return Err(
            GeetoError(
                kind="git_failed",
                message=f"could not create '{DEVELOPMENT_BRANCH}': {created.error.message}",
            )
        )
    ctx.console.success(f"Created '{DEVELOPMENT_BRANCH}' from {base}")
    return Ok(DEVELOPMENT_BRANCH)


def _squash_commits(ctx: WorkflowContext, working: str, target: str) -> Result[None, GeetoError]:
    """Fold the commits ``working`` has on top of ``target`` into one."""
    repo = ctx.repo
    count = repo.commits_ahead(working, target)
    if count <= 1:
        return Ok(None)

    reset = repo.git_checked("reset", "--soft", f"HEAD~{count - 1}")
    if isinstance(reset, Err):
        return Err(GeetoError(kind="git_failed", message=f"squash failed: {reset.error.message}"))
    amend = repo.git_checked("commit", "--amend", "--no-edit", "--no-verify")
    if isinstance(amend, Err):
        return Err(GeetoError(kind="git_failed", message=f"squash failed: {amend.error.message}"))
    ctx.console.info(f"Squashed {count} commits on '{working}'")
    return Ok(None)


def run_merge(ctx: WorkflowContext, state: WorkflowState) -> Result[WorkflowState, GeetoError]:
    repo = ctx.repo
    prompter = ctx.prompter
    console = ctx.console
    console.header("Merge")

    working = state.working_branch or repo.current_branch() or ""
    if not working:
        return Err(GeetoError(kind="git_failed", message="cannot determine the working branch"))

    branches = repo.local_branches()
    choices: list[Choice[str]] = [
        Choice(value=b, label=b) for b in merge_targets(branches, working)
    ]
    if DEVELOPMENT_BRANCH not in branches:
        choices.append(Choice(value=_CREATE_DEVELOPMENT, label=f"Create '{DEVELOPMENT_BRANCH}' branch"))
    choices.append(Choice(value=_SKIP, label="Skip merge"))

    target = prompter.choose(f"Merge '{working}' into", choices)
    if target is None:
        return Err(cancelled())
    if target == _SKIP:
        console.info("Merge skipped")
        return Ok(advance(replace(state, working_branch=working, target_branch=""), Step.MERGED))
    if target == _CREATE_DEVELOPMENT:
        created = _create_development(ctx)
        if isinstance(created, Err):
            return created
        target = created.value

    mode = prompter.choose(
        "Merge type",
        [
            Choice[MergeMode](value="no_ff", label="Merge commit", detail="--no-ff"),
            Choice[MergeMode](
                value="squash", label="Squash, then merge commit", detail="one commit, --no-ff"
            ),
        ],
    )
    if mode is None:
        return Err(cancelled())

    if mode == "squash":
        squashed = _squash_commits(ctx, working, target)
        if isinstance(squashed, Err):
            return squashed

    checkout = safe_checkout(repo, target, prompter=prompter, console=console)
    if checkout.commit_needed:
        committed = commit_with_message(ctx, state)
        if isinstance(committed, Err):
            return committed
        state = committed.value
        checkout = safe_checkout(repo, target, prompter=prompter, console=console)
    if not checkout.success:
        return Err(operation_error(checkout, f"could not switch to '{target}'"))

    merged = safe_merge(repo, working, prompter=prompter, console=console, no_ff=True)
    if not merged.success:
        if not repo.is_merge_in_progress():
            back = repo.git("checkout", working)
            if isinstance(back, Err):
                console.warning(f"Still on '{target}'; run 'git checkout {working}'")
        return Err(operation_error(merged, f"could not merge '{working}' into '{target}'"))

    console.success(f"Merged '{working}' into '{target}'")
    state = replace(state, working_branch=working, target_branch=target, current_branch=target)

    if prompter.confirm(f"Push {target} to origin?"):
        pushed = safe_push(
            repo,
            target,
            prompter=prompter,
            console=console,
            set_upstream=not repo.has_upstream(),
        )
        if not pushed.success:
            console.warning(f"'{target}' was merged locally but not pushed: {pushed.error}")

    return Ok(advance(state, Step.MERGED))
