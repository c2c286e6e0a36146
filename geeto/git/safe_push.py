"""Push with a bounded, classified retry loop."""

from __future__ import annotations

from typing import Literal

from geeto.core.prompter import Choice, Prompter
from geeto.core.result import Err, Ok
from geeto.git.operation import (
    AUTH_FAILURE,
    MERGE_CONFLICT,
    NETWORK_FAILURE,
    NO_UPSTREAM,
    REJECTED,
    GitOperationResult,
    mentions,
)
from geeto.git.repository import Repository
from geeto.git.safe_merge import resolve_rebase_conflicts
from geeto.output.console import ConsoleProtocol, Style

__all__ = ["MAX_PUSH_ATTEMPTS", "safe_push"]

MAX_PUSH_ATTEMPTS = 3

AuthAction = Literal["retry", "cancel"]
RejectedAction = Literal["pull", "force", "cancel"]


def _push_args(branch: str, *, set_upstream: bool, force: bool) -> list[str]:
    args = ["push", "-u", "origin", branch] if set_upstream else ["push", "origin", branch]
    if force:
        args.append("--force")
    return args


def safe_push(
    repo: Repository,
    branch: str,
    *,
    prompter: Prompter,
    console: ConsoleProtocol,
    set_upstream: bool = False,
    force: bool = False,
) -> GitOperationResult:
    """Push ``branch`` to origin, at most ``MAX_PUSH_ATTEMPTS`` times.

    Network failures, auth failures and rejections each get their own
    recovery prompt; a missing upstream is fixed automatically once.
    Unknown failures end the loop with git's own message.
    """
    upstream = set_upstream
    use_force = force
    upstream_fixed = False

    for attempt in range(1, MAX_PUSH_ATTEMPTS + 1):
        result = repo.git(*_push_args(branch, set_upstream=upstream, force=use_force))
        if isinstance(result, Ok):
            console.success(f"Pushed {branch} to origin")
            return GitOperationResult.ok()

        output = result.error.output
        remaining = MAX_PUSH_ATTEMPTS - attempt

        if mentions(output, NO_UPSTREAM) and not upstream_fixed:
            console.info(f"No upstream for '{branch}', retrying with --set-upstream")
            upstream = True
            upstream_fixed = True
            continue

        if mentions(output, NETWORK_FAILURE):
            console.error("Network error while pushing")
            console.print(output, Style.DIM)
            if remaining and prompter.confirm("Retry the push?"):
                continue
            return GitOperationResult.failed(f"Network error: {output}")

        if mentions(output, AUTH_FAILURE):
            console.error("Authentication with the remote failed")
            console.print(
                "Check your credentials or SSH key ('git remote -v', 'ssh -T git@github.com')",
                Style.DIM,
            )
            if not remaining:
                break
            action = prompter.choose(
                "Push authentication failed",
                [
                    Choice[AuthAction](value="retry", label="Retry push"),
                    Choice[AuthAction](value="cancel", label="Cancel"),
                ],
            )
            if action == "retry":
                continue
            return GitOperationResult.user_cancelled("Push cancelled by user")

        if mentions(output, REJECTED):
            console.warning(f"Push rejected: origin/{branch} has commits you do not have")
            if not remaining:
                break
            action = prompter.choose(
                "Push rejected",
                [
                    Choice[RejectedAction](
                        value="pull", label="Pull and retry", detail="git pull --rebase"
                    ),
                    Choice[RejectedAction](
                        value="force", label="Force push", detail="OVERWRITE remote commits"
                    ),
                    Choice[RejectedAction](value="cancel", label="Cancel"),
                ],
            )
            match action:
                case "pull":
                    pulled = repo.git("pull", "--rebase", "origin", branch)
                    if isinstance(pulled, Err):
                        if repo.is_rebase_in_progress() or mentions(
                            pulled.error.output, MERGE_CONFLICT
                        ):
                            return resolve_rebase_conflicts(
                                repo, prompter=prompter, console=console
                            )
                        return GitOperationResult.failed(f"Pull failed: {pulled.error.output}")
                    continue
                case "force":
                    if not prompter.confirm(
                        f"Force push will overwrite commits on origin/{branch}. Continue?"
                    ):
                        return GitOperationResult.user_cancelled("Force push not confirmed")
                    use_force = True
                    continue
                case _:
                    return GitOperationResult.user_cancelled("Push cancelled by user")

        return GitOperationResult.failed(output or f"git push origin {branch} failed")

    return GitOperationResult.failed("Push failed after maximum retries")
