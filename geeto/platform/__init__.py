"""Platform abstraction layer."""

from .files import atomic_write_text, ensure_ignored
from .process import ProcessError, run

__all__ = [
    "ProcessError",
    "atomic_write_text",
    "ensure_ignored",
    "run",
]
