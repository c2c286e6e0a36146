"""Filesystem helpers."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

__all__ = ["atomic_write_text", "ensure_ignored"]


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using temp file + replace."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def ensure_ignored(gitignore: Path, entry: str, *, comment: str | None = None) -> bool:
    """Append ``entry`` to a .gitignore unless a line already names it.

    Returns:
        True if the file was changed.

    Raises:
        OSError: If the file cannot be read or written.
    """
    content = gitignore.read_text(encoding="utf-8") if gitignore.exists() else ""
    wanted = entry.strip("/")
    if any(line.strip().strip("/") == wanted for line in content.splitlines()):
        return False

    if content and not content.endswith("\n"):
        content += "\n"
    if content:
        content += "\n"
    if comment:
        content += f"# {comment}\n"
    content += f"{entry}\n"
    gitignore.write_text(content, encoding="utf-8")
    return True
