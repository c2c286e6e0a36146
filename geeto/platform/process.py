"""Subprocess execution returning ``Result`` values.

Git is the only program geeto runs. Its stderr is matched against English
patterns (conflicts, rejected pushes, auth failures), so git is run with a
C locale and with terminal credential prompts disabled: a prompt would
hang behind the interactive menus.

    match run(["git", "status", "--porcelain"], cwd=root, env=GIT_ENV):
        case Ok(stdout): ...
        case Err(error): console.error(error.output)
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from geeto.core.result import Err, Ok, Result

__all__ = ["GIT_ENV", "ProcessError", "run"]

GIT_ENV: Mapping[str, str] = {
    "LC_ALL": "C",
    "GIT_TERMINAL_PROMPT": "0",
}


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that exited non-zero, timed out or could not start.

    ``returncode`` is -1 when the process never produced an exit status.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def output(self) -> str:
        """stderr then stdout, stripped; what failure patterns are matched against."""
        return "\n".join(part for part in (self.stderr.strip(), self.stdout.strip()) if part)

    def __str__(self) -> str:
        shown = " ".join(self.command[:3])
        if len(self.command) > 3:
            shown += " ..."
        return f"{shown} failed (exit {self.returncode})"


def _not_run(cmd: tuple[str, ...], reason: str, stdout: str = "") -> Err[ProcessError]:
    return Err(ProcessError(command=cmd, returncode=-1, stdout=stdout, stderr=reason))


def run(
    cmd: Sequence[str],
    cwd: Path,
    *,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run ``cmd`` in ``cwd`` and return its stdout.

    ``env`` entries are layered over the current environment. stdin is
    closed so a command can never wait for input.
    """
    command = tuple(cmd)
    merged = {**os.environ, **env} if env else None
    try:
        proc = subprocess.run(
            command,
            cwd=str(cwd),
            env=merged,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return _not_run(command, f"Command timed out after {timeout}s", partial)
    except OSError as e:
        return _not_run(command, str(e))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=command,
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )
    return Ok(proc.stdout)
