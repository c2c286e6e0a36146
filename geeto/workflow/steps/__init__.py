"""Step handlers, one per workflow step."""

from geeto.workflow.steps.branch import run_branch
from geeto.workflow.steps.cleanup import run_cleanup
from geeto.workflow.steps.commit import run_commit
from geeto.workflow.steps.merge import merge_targets, run_merge
from geeto.workflow.steps.push import run_push
from geeto.workflow.steps.stage import run_stage

__all__ = [
    "merge_targets",
    "run_branch",
    "run_cleanup",
    "run_commit",
    "run_merge",
    "run_push",
    "run_stage",
]
