"""Scripted git runner for tests.

``ScriptedGit`` stands in for the git binary behind ``Repository``. Each
registered argument prefix answers with a queue of responses; the last
response repeats once the queue is drained. Unregistered commands succeed
with empty output.

    git = ScriptedGit()
    git.on(["push"], fail("rejected: non-fast-forward"))
    repo = Repository(tmp_path, runner=git)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from geeto.core.result import Err, Ok, Result
from geeto.platform.process import ProcessError

__all__ = ["ScriptedGit", "fail", "ok"]


def ok(stdout: str = "") -> Ok[str]:
    return Ok(stdout)


def fail(stderr: str, returncode: int = 1, stdout: str = "") -> Err[ProcessError]:
    return Err(ProcessError(command=("git",), returncode=returncode, stdout=stdout, stderr=stderr))


@dataclass
class _Script:
    prefix: tuple[str, ...]
    responses: list[Result[str, ProcessError]]


@dataclass
class ScriptedGit:
    scripts: list[_Script] = field(default_factory=lambda: list[_Script]())
    calls: list[tuple[str, ...]] = field(default_factory=lambda: list[tuple[str, ...]]())

    def on(self, prefix: list[str], *responses: Result[str, ProcessError] | str) -> ScriptedGit:
        """Register responses for commands starting with ``prefix``."""
        queue: list[Result[str, ProcessError]] = [
            Ok(r) if isinstance(r, str) else r for r in responses
        ] or [Ok("")]
        self.scripts.append(_Script(prefix=tuple(prefix), responses=queue))
        return self

    def __call__(self, args: list[str], cwd: Path, timeout: float) -> Result[str, ProcessError]:
        call = tuple(args)
        self.calls.append(call)

        best: _Script | None = None
        for script in self.scripts:
            if call[: len(script.prefix)] == script.prefix:
                if best is None or len(script.prefix) > len(best.prefix):
                    best = script
        if best is None:
            return Ok("")
        if len(best.responses) > 1:
            return best.responses.pop(0)
        return best.responses[0]

    # Test helpers

    def ran(self, *prefix: str) -> bool:
        return self.count(*prefix) > 0

    def count(self, *prefix: str) -> int:
        return sum(1 for c in self.calls if c[: len(prefix)] == prefix)
