"""Resumable stage -> branch -> commit -> push -> merge -> cleanup workflow."""

from geeto.workflow.checkpoint import CheckpointStore, checkpoint_or_warn
from geeto.workflow.context import WorkflowContext
from geeto.workflow.machine import RunOptions, run_workflow
from geeto.workflow.state import Step, WorkflowState, step_name

__all__ = [
    "CheckpointStore",
    "RunOptions",
    "Step",
    "WorkflowContext",
    "WorkflowState",
    "checkpoint_or_warn",
    "run_workflow",
    "step_name",
]
