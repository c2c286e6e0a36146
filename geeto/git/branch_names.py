"""Branch name rules: validation, prefixes and suffix cleaning."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Literal

from geeto.core.errors import GeetoError
from geeto.core.result import Err, Ok, Result

__all__ = [
    "PROTECTED_BRANCHES",
    "branch_prefix",
    "clean_branch_suffix",
    "is_incomplete_suffix",
    "is_protected_branch",
    "recommended_separator",
    "validate_branch_name",
]

MAX_BRANCH_NAME_LENGTH = 255

PROTECTED_BRANCHES = frozenset({"main", "master", "development", "develop", "dev"})

_RESERVED_NAMES = frozenset({"HEAD", "ORIG_HEAD", "FETCH_HEAD", "MERGE_HEAD", "CHERRY_PICK_HEAD"})
_INVALID_CHARS = re.compile(r"[\s~^:?*\[\\]")

_KNOWN_PREFIXES = {
    "development": "dev",
    "develop": "dev",
    "dev": "dev",
    "main": "release",
    "master": "release",
    "staging": "stage",
    "production": "hotfix",
    "prod": "hotfix",
    "testing": "test",
    "test": "test",
    "qa": "qa",
    "feature": "feat",
    "features": "feat",
    "bugfix": "fix",
    "hotfix": "hotfix",
    "release": "release",
}

# Suffixes ending in a dangling connective were cut off mid-phrase.
_INCOMPLETE_TAIL = re.compile(
    r"[-_](and|or|with|for|the|a|an|in|on|at|to|of|from|via|using|per|by)$"
)

Separator = Literal["#", "/"]
WordSeparator = Literal["-", "_"]


def _invalid(message: str) -> Err[GeetoError]:
    return Err(GeetoError(kind="validation", message=message))


def validate_branch_name(name: str) -> Result[str, GeetoError]:
    """Check a branch name against git ref rules.

    Returns:
        Ok(name) when valid, Err(GeetoError(kind="validation")) otherwise
    """
    if not name:
        return _invalid("Branch name cannot be empty")
    if len(name) > MAX_BRANCH_NAME_LENGTH:
        return _invalid(f"Branch name is longer than {MAX_BRANCH_NAME_LENGTH} characters")
    if _INVALID_CHARS.search(name):
        return _invalid("Branch name contains invalid characters (space ~ ^ : ? * [ \\)")
    if name in _RESERVED_NAMES:
        return _invalid(f"'{name}' is a reserved git name")
    if name.startswith((".", "/")) or name.endswith((".", "/")):
        return _invalid("Branch name cannot start or end with '.' or '/'")
    if ".." in name or "//" in name:
        return _invalid("Branch name cannot contain '..' or '//'")
    if "@{" in name:
        return _invalid("Branch name cannot contain '@{'")
    if name.endswith(".lock"):
        return _invalid("Branch name cannot end with '.lock'")
    return Ok(name)


def is_protected_branch(name: str) -> bool:
    return name.lower() in PROTECTED_BRANCHES


def recommended_separator(branches: Iterable[str]) -> Separator:
    """Pick the separator the repository already uses most ('#' on ties)."""
    names = list(branches)
    hashes = sum(1 for b in names if "#" in b)
    slashes = sum(1 for b in names if "/" in b)
    return "#" if hashes >= slashes else "/"


def branch_prefix(current: str | None, separator: Separator) -> str:
    """Derive the prefix for a new branch from the branch it starts from.

    ``feat/login`` keeps ``feat/``; well-known long-lived branches map to a
    conventional prefix (``main`` -> ``release``); anything else gets ``dev``.
    """
    if current:
        cut = min((i for i in (current.find("/"), current.find("#")) if i > 0), default=-1)
        if cut > 0:
            return current[: cut + 1]
        mapped = _KNOWN_PREFIXES.get(current.lower())
        if mapped is not None:
            return f"{mapped}{separator}"
    return f"dev{separator}"


def clean_branch_suffix(raw: str, word_separator: WordSeparator = "-") -> str:
    """Normalise provider output into a branch name suffix.

    Lower-cases, turns every run of non-word characters into the word
    separator, collapses repeats and trims separators at both ends.
    """
    line = raw.strip().splitlines()[0] if raw.strip() else ""
    text = line.lower()
    text = re.sub(r"[^a-z0-9_]+", word_separator, text)
    text = re.sub(r"[-_]{2,}", word_separator, text)
    return text.strip("-_")


def is_incomplete_suffix(suffix: str) -> bool:
    return bool(_INCOMPLETE_TAIL.search(suffix))
