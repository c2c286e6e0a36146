"""Git repository abstraction.

All commands run through a ``GitRunner`` so tests can replace the git binary
with a scripted fake (see ``geeto.git.testing``).

Usage:
    repo = Repository(Path("/path/to/repo"))

    branch = repo.current_branch()
    staged = repo.staged_files()

    match repo.git("push", "-u", "origin", branch):
        case Ok(_):
            print("pushed")
        case Err(e):
            print(e.output)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from geeto.core.result import Err, Ok, Result
from geeto.platform.process import GIT_ENV, ProcessError
from geeto.platform.process import run as run_process

GIT_TIMEOUT_SECONDS = 30.0
GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "clone", "ls-remote"})
_CONFLICT_CODES = frozenset({"UU", "AA", "DD"})

GitRunner = Callable[[list[str], Path, float], Result[str, ProcessError]]

__all__ = [
    "GitError",
    "GitRunner",
    "Repository",
    "StatusEntry",
    "find_repository_root",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single line of ``git status --porcelain``.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??", "UU")
        path: File path
    """

    xy: str
    path: str

    @property
    def is_staged(self) -> bool:
        return self.xy != "??" and self.xy[0] != " "

    @property
    def is_untracked(self) -> bool:
        return self.xy == "??"

    @property
    def is_conflicted(self) -> bool:
        return self.xy in _CONFLICT_CODES


def _system_git(args: list[str], cwd: Path, timeout: float) -> Result[str, ProcessError]:
    return run_process(["git", *args], cwd=cwd, env=GIT_ENV, timeout=timeout)


def _to_git_error(command: str, error: ProcessError) -> GitError:
    return GitError(
        command=command,
        message=error.output or f"git {command} failed",
        returncode=error.returncode,
    )


def find_repository_root(
    cwd: Path, runner: GitRunner = _system_git
) -> Result[Path, GitError]:
    """Resolve the top-level directory of the repository containing cwd."""
    result = runner(["rev-parse", "--show-toplevel"], cwd, GIT_TIMEOUT_SECONDS)
    match result:
        case Err(e):
            return Err(
                GitError(
                    command="rev-parse",
                    message=e.stderr.strip() or f"not a git repository: {cwd}",
                    returncode=e.returncode,
                )
            )
        case Ok(stdout):
            top = stdout.strip()
            if not top:
                return Err(GitError(command="rev-parse", message=f"not a git repository: {cwd}"))
            return Ok(Path(top))


class Repository:
    """Single git repository.

    Query methods return plain values and degrade to empty/False when git
    fails; mutating callers go through ``git()`` and inspect the Result.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path, runner: GitRunner | None = None) -> None:
        self.path = path
        self._runner = runner or _system_git

    def git(self, *args: str) -> Result[str, ProcessError]:
        """Run ``git <args>`` in this repository."""
        command = args[0] if args else ""
        timeout = (
            GIT_NETWORK_TIMEOUT_SECONDS if command in _NETWORK_COMMANDS else GIT_TIMEOUT_SECONDS
        )
        return self._runner(list(args), self.path, timeout)

    def git_checked(self, *args: str) -> Result[str, GitError]:
        """Like ``git()`` but with the error converted to GitError."""
        result = self.git(*args)
        if isinstance(result, Err):
            return Err(_to_git_error(args[0] if args else "", result.error))
        return result

    # -- queries ------------------------------------------------------------

    def current_branch(self) -> str | None:
        """Current branch name, None on detached HEAD or error."""
        match self.git("rev-parse", "--abbrev-ref", "HEAD"):
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch in {"", "HEAD"} else branch
            case Err(_):
                return None

    def status_entries(self) -> Result[list[StatusEntry], GitError]:
        """Parse ``git status --porcelain``."""
        match self.git("status", "--porcelain"):
            case Err(e):
                return Err(_to_git_error("status", e))
            case Ok(stdout):
                entries: list[StatusEntry] = []
                for line in stdout.splitlines():
                    if len(line) < 4:
                        continue
                    entries.append(StatusEntry(xy=line[:2], path=line[3:]))
                return Ok(entries)

    def changed_files(self) -> list[str]:
        """Paths with any change (staged, unstaged or untracked)."""
        return [e.path for e in self.status_entries().unwrap_or([])]

    def staged_files(self) -> list[str]:
        """Paths currently in the index, always read live from git."""
        match self.git("diff", "--name-only", "--cached"):
            case Ok(stdout):
                return [ln.strip() for ln in stdout.splitlines() if ln.strip()]
            case Err(_):
                return []

    def has_uncommitted_changes(self) -> bool:
        match self.git("status", "--porcelain"):
            case Ok(stdout):
                return stdout.strip() != ""
            case Err(_):
                return False

    def conflicted_files(self) -> list[str]:
        """Paths with UU/AA/DD status."""
        return [e.path for e in self.status_entries().unwrap_or([]) if e.is_conflicted]

    def unmerged_files(self) -> list[str]:
        match self.git("diff", "--name-only", "--diff-filter=U"):
            case Ok(stdout):
                return [ln.strip() for ln in stdout.splitlines() if ln.strip()]
            case Err(_):
                return []

    def is_merge_in_progress(self) -> bool:
        return isinstance(self.git("rev-parse", "-q", "--verify", "MERGE_HEAD"), Ok)

    def is_rebase_in_progress(self) -> bool:
        match self.git("rev-parse", "--git-dir"):
            case Ok(stdout):
                raw = stdout.strip()
                if not raw:
                    return False
                git_dir = Path(raw)
                if not git_dir.is_absolute():
                    git_dir = self.path / git_dir
                return (git_dir / "rebase-merge").exists() or (git_dir / "rebase-apply").exists()
            case Err(_):
                return False

    def branch_exists(self, name: str) -> bool:
        result = self.git("show-ref", "--verify", "--quiet", f"refs/heads/{name}")
        return isinstance(result, Ok)

    def local_branches(self) -> list[str]:
        match self.git("for-each-ref", "--format=%(refname:short)", "refs/heads"):
            case Ok(stdout):
                return [ln.strip() for ln in stdout.splitlines() if ln.strip()]
            case Err(_):
                return []

    def has_upstream(self) -> bool:
        result = self.git("rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}")
        return isinstance(result, Ok)

    def staged_diff(self, *, max_chars: int = 8000) -> str:
        """Staged diff for AI prompts, truncated to ``max_chars``."""
        match self.git("diff", "--cached"):
            case Ok(stdout):
                return stdout[:max_chars]
            case Err(_):
                return ""

    def commits_ahead(self, branch: str, base: str) -> int:
        match self.git("rev-list", "--count", branch, f"^{base}"):
            case Ok(stdout):
                try:
                    return int(stdout.strip() or "0")
                except ValueError:
                    return 0
            case Err(_):
                return 0

    # -- stash --------------------------------------------------------------

    def stash_push(self, message: str) -> Result[str, GitError]:
        return self.git_checked("stash", "push", "-m", message)

    def stash_has(self, marker: str) -> bool:
        match self.git("stash", "list"):
            case Ok(stdout):
                return marker in stdout
            case Err(_):
                return False
