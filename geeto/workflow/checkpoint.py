"""Checkpoint store for ``<project>/.geeto/geeto-state.json``.

The file is written atomically after every completed step. Loading never
fails: a missing or damaged checkpoint simply means there is nothing to
resume.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import cast

from geeto.ai.providers.base import ProviderChoice
from geeto.core.config import GEETO_DIR
from geeto.core.errors import GeetoError
from geeto.core.result import Err, Ok, Result
from geeto.core.structured import as_str_dict, get_bool, get_int, get_str
from geeto.output.console import ConsoleProtocol
from geeto.platform.files import atomic_write_text, ensure_ignored
from geeto.workflow.state import Step, WorkflowState, reset

__all__ = ["CHECKPOINT_FILE", "CheckpointStore", "checkpoint_or_warn"]

CHECKPOINT_FILE = "geeto-state.json"

_PROVIDERS = {"copilot", "gemini", "openrouter", "manual"}


def _to_payload(state: WorkflowState) -> dict[str, object]:
    return {
        "step": int(state.step),
        "workingBranch": state.working_branch,
        "targetBranch": state.target_branch,
        "currentBranch": state.current_branch,
        "aiProvider": state.ai_provider,
        "copilotModel": state.copilot_model,
        "openrouterModel": state.openrouter_model,
        "geminiModel": state.gemini_model,
        "timestamp": state.timestamp,
        "skippedCommit": state.skipped_commit,
        "skippedPush": state.skipped_push,
    }


def _from_payload(obj: object) -> WorkflowState | None:
    d = as_str_dict(obj)
    if d is None:
        return None

    step_value = get_int(d, "step")
    if step_value is None or step_value not in {s.value for s in Step}:
        return None

    provider = get_str(d, "aiProvider") or "manual"
    if provider not in _PROVIDERS:
        provider = "manual"

    def model(key: str, owner: str) -> str | None:
        return get_str(d, key) if provider == owner else None

    return WorkflowState(
        step=Step(step_value),
        working_branch=get_str(d, "workingBranch") or "",
        target_branch=get_str(d, "targetBranch") or "",
        current_branch=get_str(d, "currentBranch") or "",
        ai_provider=cast(ProviderChoice, provider),
        copilot_model=model("copilotModel", "copilot"),
        openrouter_model=model("openrouterModel", "openrouter"),
        gemini_model=model("geminiModel", "gemini"),
        timestamp=get_str(d, "timestamp") or "",
        skipped_commit=get_bool(d, "skippedCommit"),
        skipped_push=get_bool(d, "skippedPush"),
    )


class CheckpointStore:
    """Load and save the workflow checkpoint of one project."""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def path(self) -> Path:
        return self._root / GEETO_DIR / CHECKPOINT_FILE

    def save(self, state: WorkflowState) -> Result[None, GeetoError]:
        path = self.path
        payload = _to_payload(state)
        try:
            atomic_write_text(path, json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        except OSError as e:
            return Err(
                GeetoError(
                    kind="io_failed",
                    message=f"failed to write checkpoint: {e}",
                    hint=str(path),
                )
            )

        try:
            ensure_ignored(self._root / ".gitignore", GEETO_DIR, comment="Geeto state files")
        except OSError as e:
            return Err(
                GeetoError(
                    kind="io_failed",
                    message=f"checkpoint saved but .gitignore could not be updated: {e}",
                    hint=f"add {GEETO_DIR} to .gitignore",
                )
            )
        return Ok(None)

    def load(self) -> WorkflowState | None:
        """Return the saved state, or None when there is nothing usable."""
        path = self.path
        if not path.is_file():
            return None
        try:
            obj: object = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            return None
        return _from_payload(obj)

    def reset_preserving_provider(
        self, state: WorkflowState
    ) -> Result[WorkflowState, GeetoError]:
        """Write an INIT checkpoint that keeps the provider and model."""
        fresh = reset(state)
        saved = self.save(fresh)
        if isinstance(saved, Err):
            return saved
        return Ok(fresh)

    def clear(self) -> Result[None, GeetoError]:
        path = self.path
        if not path.exists():
            return Ok(None)
        try:
            path.unlink()
        except OSError as e:
            return Err(
                GeetoError(
                    kind="io_failed",
                    message=f"failed to delete checkpoint: {e}",
                    hint=str(path),
                )
            )
        return Ok(None)


def checkpoint_or_warn(
    store: CheckpointStore, state: WorkflowState, console: ConsoleProtocol
) -> Result[WorkflowState, GeetoError]:
    """Save ``state``; a failed write is a warning, never a failed workflow."""
    saved = store.save(state)
    if isinstance(saved, Err):
        console.warning(saved.error.message)
        if saved.error.hint:
            console.print(f"  {saved.error.hint}")
    return Ok(state)
