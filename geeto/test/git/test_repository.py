"""Tests for geeto.git.repository."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from geeto.core.result import Err, Ok, Result
from geeto.git.repository import (
    GIT_NETWORK_TIMEOUT_SECONDS,
    GIT_TIMEOUT_SECONDS,
    Repository,
    StatusEntry,
    find_repository_root,
)
from geeto.git.testing import ScriptedGit, fail, ok
from geeto.platform.process import ProcessError

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


# =============================================================================
# StatusEntry
# =============================================================================


class TestStatusEntry:
    def test_staged(self) -> None:
        assert StatusEntry(xy="M ", path="a.py").is_staged
        assert not StatusEntry(xy=" M", path="a.py").is_staged

    def test_untracked(self) -> None:
        entry = StatusEntry(xy="??", path="new.py")
        assert entry.is_untracked
        assert not entry.is_staged

    @pytest.mark.parametrize("xy", ["UU", "AA", "DD"])
    def test_conflicted(self, xy: str) -> None:
        assert StatusEntry(xy=xy, path="a.py").is_conflicted

    def test_modified_is_not_conflicted(self) -> None:
        assert not StatusEntry(xy="MM", path="a.py").is_conflicted


# =============================================================================
# Queries against a scripted git
# =============================================================================


class TestQueries:
    def test_current_branch(self, tmp_path: Path) -> None:
        git = ScriptedGit().on(["rev-parse", "--abbrev-ref", "HEAD"], "feat/login\n")
        assert Repository(tmp_path, runner=git).current_branch() == "feat/login"

    def test_detached_head_has_no_branch(self, tmp_path: Path) -> None:
        git = ScriptedGit().on(["rev-parse", "--abbrev-ref", "HEAD"], "HEAD\n")
        assert Repository(tmp_path, runner=git).current_branch() is None

    def test_status_parsing(self, tmp_path: Path) -> None:
        git = ScriptedGit().on(["status", "--porcelain"], "M  staged.py\n M dirty.py\n?? new.py\nUU both.py\n")
        repo = Repository(tmp_path, runner=git)

        assert repo.changed_files() == ["staged.py", "dirty.py", "new.py", "both.py"]
        assert repo.conflicted_files() == ["both.py"]
        assert repo.has_uncommitted_changes()

    def test_clean_tree(self, tmp_path: Path) -> None:
        repo = Repository(tmp_path, runner=ScriptedGit().on(["status", "--porcelain"], ""))
        assert not repo.has_uncommitted_changes()
        assert repo.changed_files() == []

    def test_staged_files_are_read_live(self, tmp_path: Path) -> None:
        git = ScriptedGit().on(["diff", "--name-only", "--cached"], "a.py\n", "a.py\nb.py\n")
        repo = Repository(tmp_path, runner=git)

        assert repo.staged_files() == ["a.py"]
        assert repo.staged_files() == ["a.py", "b.py"]
        assert git.count("diff", "--name-only", "--cached") == 2

    def test_merge_in_progress(self, tmp_path: Path) -> None:
        git = ScriptedGit().on(["rev-parse", "-q", "--verify", "MERGE_HEAD"], fail(""))
        assert not Repository(tmp_path, runner=git).is_merge_in_progress()

        git = ScriptedGit().on(["rev-parse", "-q", "--verify", "MERGE_HEAD"], "abc123\n")
        assert Repository(tmp_path, runner=git).is_merge_in_progress()

    def test_rebase_in_progress(self, tmp_path: Path) -> None:
        (tmp_path / ".git" / "rebase-merge").mkdir(parents=True)
        git = ScriptedGit().on(["rev-parse", "--git-dir"], ".git\n")
        assert Repository(tmp_path, runner=git).is_rebase_in_progress()

    def test_branch_queries(self, tmp_path: Path) -> None:
        git = (
            ScriptedGit()
            .on(["show-ref", "--verify", "--quiet", "refs/heads/main"], ok())
            .on(["show-ref", "--verify", "--quiet", "refs/heads/nope"], fail(""))
            .on(["for-each-ref"], "main\ndev#login\n")
        )
        repo = Repository(tmp_path, runner=git)

        assert repo.branch_exists("main")
        assert not repo.branch_exists("nope")
        assert repo.local_branches() == ["main", "dev#login"]

    def test_staged_diff_is_truncated(self, tmp_path: Path) -> None:
        git = ScriptedGit().on(["diff", "--cached"], "x" * 100)
        assert Repository(tmp_path, runner=git).staged_diff(max_chars=10) == "x" * 10

    def test_commits_ahead(self, tmp_path: Path) -> None:
        git = ScriptedGit().on(["rev-list", "--count"], "4\n")
        assert Repository(tmp_path, runner=git).commits_ahead("feat", "main") == 4
        assert git.ran("rev-list", "--count", "feat", "^main")

    def test_stash_marker(self, tmp_path: Path) -> None:
        git = ScriptedGit().on(["stash", "list"], "stash@{0}: On feat: Geeto auto-stash before pull\n")
        repo = Repository(tmp_path, runner=git)
        assert repo.stash_has("Geeto auto-stash before pull")
        assert not repo.stash_has("something else")

    def test_git_checked_converts_errors(self, tmp_path: Path) -> None:
        git = ScriptedGit().on(["add"], fail("fatal: pathspec"))
        result = Repository(tmp_path, runner=git).git_checked("add", "-A")
        assert isinstance(result, Err)
        assert result.error.command == "add"
        assert result.error.message == "fatal: pathspec"


def test_network_commands_get_the_longer_timeout(tmp_path: Path) -> None:
    seen: dict[str, float] = {}

    def runner(args: list[str], cwd: Path, timeout: float) -> Result[str, ProcessError]:
        seen[args[0]] = timeout
        return Ok("")

    repo = Repository(tmp_path, runner=runner)
    repo.git("push", "origin", "main")
    repo.git("pull")
    repo.git("status")

    assert seen == {
        "push": GIT_NETWORK_TIMEOUT_SECONDS,
        "pull": GIT_NETWORK_TIMEOUT_SECONDS,
        "status": GIT_TIMEOUT_SECONDS,
    }


class TestFindRepositoryRoot:
    def test_returns_top_level(self, tmp_path: Path) -> None:
        git = ScriptedGit().on(["rev-parse", "--show-toplevel"], f"{tmp_path}\n")
        assert find_repository_root(tmp_path / "sub", git) == Ok(tmp_path)

    def test_outside_a_repository(self, tmp_path: Path) -> None:
        git = ScriptedGit().on(
            ["rev-parse", "--show-toplevel"], fail("fatal: not a git repository", 128)
        )
        result = find_repository_root(tmp_path, git)
        assert isinstance(result, Err)
        assert "not a git repository" in result.error.message


@requires_git
def test_against_a_real_repository(tmp_path: Path) -> None:
    def git(*args: str) -> None:
        subprocess.run(["git", *args], cwd=tmp_path, check=True, capture_output=True)

    git("init", "-b", "main")
    git("config", "user.email", "dev@example.com")
    git("config", "user.name", "Dev")
    (tmp_path / "a.txt").write_text("a\n", encoding="utf-8")
    git("add", "a.txt")
    git("commit", "-m", "feat: initial")
    (tmp_path / "b.txt").write_text("b\n", encoding="utf-8")

    repo = Repository(tmp_path)
    assert repo.current_branch() == "main"
    assert repo.changed_files() == ["b.txt"]
    assert repo.staged_files() == []
    assert repo.branch_exists("main")
    assert not repo.is_merge_in_progress()
    assert not repo.is_rebase_in_progress()
