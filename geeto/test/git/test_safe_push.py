"""Tests for geeto.git.safe_push."""

from __future__ import annotations

from pathlib import Path

from geeto.core.prompter import ScriptedPrompter
from geeto.git.repository import Repository
from geeto.git.safe_push import MAX_PUSH_ATTEMPTS, safe_push
from geeto.git.testing import ScriptedGit, fail, ok
from geeto.output.console import MockConsole

REJECTED = " ! [rejected]        feat -> feat (non-fast-forward)"
OFFLINE = "fatal: unable to access 'https://github.com/x/y.git/': Could not resolve host: github.com"
NO_UPSTREAM = "fatal: The current branch feat has no upstream branch."
PULL_CONFLICT = "CONFLICT (content): Merge conflict in app.py\nerror: could not apply 1a2b3c4... feat: add login"


def _push(git: ScriptedGit, prompter: ScriptedPrompter, tmp_path: Path, **kwargs: bool):
    return safe_push(Repository(tmp_path, git), "feat", prompter=prompter, console=MockConsole(), **kwargs)


class TestSafePush:
    def test_success(self, tmp_path: Path) -> None:
        git = ScriptedGit().on(["push"], ok())
        assert _push(git, ScriptedPrompter(), tmp_path).success
        assert git.calls == [("push", "origin", "feat")]

    def test_set_upstream(self, tmp_path: Path) -> None:
        git = ScriptedGit()
        assert _push(git, ScriptedPrompter(), tmp_path, set_upstream=True).success
        assert git.calls == [("push", "-u", "origin", "feat")]

    def test_missing_upstream_is_fixed_automatically(self, tmp_path: Path) -> None:
        git = ScriptedGit().on(["push"], fail(NO_UPSTREAM), ok())
        prompter = ScriptedPrompter()

        assert _push(git, prompter, tmp_path).success
        assert git.calls == [("push", "origin", "feat"), ("push", "-u", "origin", "feat")]
        assert prompter.records == []

    def test_unknown_failure_stops_immediately(self, tmp_path: Path) -> None:
        git = ScriptedGit().on(["push"], fail("fatal: something unexpected"))

        result = _push(git, ScriptedPrompter(), tmp_path)

        assert result.error == "fatal: something unexpected"
        assert git.count("push") == 1


# =============================================================================
# Bounded retries
# =============================================================================


class TestRetryBound:
    def test_rejections_stop_after_three_attempts(self, tmp_path: Path) -> None:
        git = ScriptedGit().on(["push"], fail(REJECTED))
        prompter = ScriptedPrompter(["pull", "pull"])

        result = _push(git, prompter, tmp_path)

        assert not result.success
        assert result.error == "Push failed after maximum retries"
        assert git.count("push") == MAX_PUSH_ATTEMPTS
        assert git.count("pull", "--rebase", "origin", "feat") == 2
        assert prompter.exhausted

    def test_network_failures_stop_after_three_attempts(self, tmp_path: Path) -> None:
        git = ScriptedGit().on(["push"], fail(OFFLINE))
        prompter = ScriptedPrompter([True, True])

        result = _push(git, prompter, tmp_path)

        assert result.error is not None
        assert result.error.startswith("Network error:")
        assert git.count("push") == MAX_PUSH_ATTEMPTS
        assert prompter.titles == ["Retry the push?", "Retry the push?"]

    def test_network_retry_declined(self, tmp_path: Path) -> None:
        git = ScriptedGit().on(["push"], fail(OFFLINE))

        result = _push(git, ScriptedPrompter([False]), tmp_path)

        assert result.error is not None and result.error.startswith("Network error:")
        assert git.count("push") == 1

    def test_failed_pull_ends_the_loop(self, tmp_path: Path) -> None:
        missing = "fatal: couldn't find remote ref feat"
        git = ScriptedGit().on(["push"], fail(REJECTED)).on(["pull"], fail(missing))

        result = _push(git, ScriptedPrompter(["pull"]), tmp_path)

        assert result.error == f"Pull failed: {missing}"


# =============================================================================
# Conflicts while pulling before a retry
# =============================================================================


class TestPullConflicts:
    @staticmethod
    def _rebasing(tmp_path: Path) -> ScriptedGit:
        (tmp_path / ".git" / "rebase-merge").mkdir(parents=True)
        return (
            ScriptedGit()
            .on(["push"], fail(REJECTED))
            .on(["pull"], fail(PULL_CONFLICT))
            .on(["rev-parse", "--git-dir"], ".git\n")
            .on(["diff", "--name-only", "--diff-filter=U"], "app.py\n")
        )

    def test_abort_restores_the_branch(self, tmp_path: Path) -> None:
        git = self._rebasing(tmp_path)
        prompter = ScriptedPrompter(["pull", "abort"])

        result = _push(git, prompter, tmp_path)

        assert result.conflict
        assert result.error == "Rebase conflict - aborted by user"
        assert git.calls[-1] == ("rebase", "--abort")
        assert git.count("push") == 1
        assert prompter.titles == ["Push rejected", "Rebase conflicts"]

    def test_cancel_counts_as_abort(self, tmp_path: Path) -> None:
        git = self._rebasing(tmp_path)

        result = _push(git, ScriptedPrompter(["pull", None]), tmp_path)

        assert result.conflict
        assert git.ran("rebase", "--abort")

    def test_manual_resolution_shows_the_commands(self, tmp_path: Path) -> None:
        git = self._rebasing(tmp_path)
        console = MockConsole()

        result = safe_push(
            Repository(tmp_path, git),
            "feat",
            prompter=ScriptedPrompter(["pull", "manual"]),
            console=console,
        )

        assert result.conflict
        assert not git.ran("rebase", "--abort")
        assert "  git rebase --continue" in console.messages
        assert "  git rebase --abort" in console.messages
        assert "  - app.py" in console.messages


class TestForcePush:
    def test_requires_confirmation(self, tmp_path: Path) -> None:
        git = ScriptedGit().on(["push"], fail(REJECTED))
        prompter = ScriptedPrompter(["force", False])

        result = _push(git, prompter, tmp_path)

        assert result.cancelled
        assert not any("--force" in call for call in git.calls)
        assert prompter.titles[-1] == "Force push will overwrite commits on origin/feat. Continue?"

    def test_confirmed_force(self, tmp_path: Path) -> None:
        git = ScriptedGit().on(["push"], fail(REJECTED), ok())

        result = _push(git, ScriptedPrompter(["force", True]), tmp_path)

        assert result.success
        assert git.calls[-1] == ("push", "origin", "feat", "--force")


def test_auth_failure_can_be_cancelled(tmp_path: Path) -> None:
    git = ScriptedGit().on(["push"], fail("git@github.com: Permission denied (publickey)."))
    prompter = ScriptedPrompter(["cancel"])

    result = _push(git, prompter, tmp_path)

    assert result.cancelled
    assert prompter.titles == ["Push authentication failed"]
