"""Git layer.

- Repository: git command runner and repository queries
- safe_*: mutating operations with failure detection and recovery menus
- branch_names: validation, prefixes and suffix cleaning
"""

from geeto.git.branch_names import (
    branch_prefix,
    clean_branch_suffix,
    is_incomplete_suffix,
    is_protected_branch,
    recommended_separator,
    validate_branch_name,
)
from geeto.git.operation import GitOperationResult
from geeto.git.repository import GitError, Repository, StatusEntry, find_repository_root
from geeto.git.safe_checkout import safe_checkout
from geeto.git.safe_commit import safe_commit
from geeto.git.safe_merge import safe_merge
from geeto.git.safe_pull import safe_pull
from geeto.git.safe_push import MAX_PUSH_ATTEMPTS, safe_push

__all__ = [
    # Repository
    "GitError",
    "Repository",
    "StatusEntry",
    "find_repository_root",
    # Safe operations
    "GitOperationResult",
    "MAX_PUSH_ATTEMPTS",
    "safe_checkout",
    "safe_commit",
    "safe_merge",
    "safe_pull",
    "safe_push",
    # Branch names
    "branch_prefix",
    "clean_branch_suffix",
    "is_incomplete_suffix",
    "is_protected_branch",
    "recommended_separator",
    "validate_branch_name",
]
