"""Tests for geeto.workflow.checkpoint."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from geeto.core.result import Err, Ok
from geeto.output.console import MockConsole
from geeto.workflow.checkpoint import CHECKPOINT_FILE, CheckpointStore, checkpoint_or_warn
from geeto.workflow.state import Step, WorkflowState


def _saved_state() -> WorkflowState:
    return WorkflowState(
        step=Step.COMMITTED,
        working_branch="dev#add-login",
        current_branch="dev#add-login",
        ai_provider="openrouter",
        openrouter_model="minimax/minimax-m2.1",
        timestamp="2026-10-19T08:30:00+00:00",
        skipped_push=True,
    )


class TestSaveLoad:
    def test_round_trip(self, tmp_path: Path) -> None:
        store = CheckpointStore(tmp_path)
        assert store.save(_saved_state()) == Ok(None)
        assert store.load() == _saved_state()

    def test_file_format(self, tmp_path: Path) -> None:
        store = CheckpointStore(tmp_path)
        store.save(_saved_state())

        raw = store.path.read_text(encoding="utf-8")
        data = json.loads(raw)

        assert store.path == tmp_path / ".geeto" / CHECKPOINT_FILE
        assert raw.endswith("}\n")
        assert data["step"] == 3
        assert data["workingBranch"] == "dev#add-login"
        assert data["openrouterModel"] == "minimax/minimax-m2.1"
        assert data["skippedPush"] is True

    def test_gitignore_entry_added_once(self, tmp_path: Path) -> None:
        (tmp_path / ".gitignore").write_text("node_modules/", encoding="utf-8")
        store = CheckpointStore(tmp_path)

        store.save(_saved_state())
        store.save(_saved_state())

        assert (tmp_path / ".gitignore").read_text(encoding="utf-8") == (
            "node_modules/\n\n# Geeto state files\n.geeto\n"
        )


class TestLoad:
    def test_missing(self, tmp_path: Path) -> None:
        assert CheckpointStore(tmp_path).load() is None

    @pytest.mark.parametrize(
        "content",
        ["{not json", "[]", '{"step": 9}', '{"step": "three"}', '{"workingBranch": "x"}'],
    )
    def test_unusable_content(self, tmp_path: Path, content: str) -> None:
        store = CheckpointStore(tmp_path)
        store.path.parent.mkdir(parents=True)
        store.path.write_text(content, encoding="utf-8")
        assert store.load() is None

    def test_unknown_provider_becomes_manual(self, tmp_path: Path) -> None:
        store = CheckpointStore(tmp_path)
        store.path.parent.mkdir(parents=True)
        store.path.write_text('{"step": 1, "aiProvider": "claude", "geminiModel": "x"}', encoding="utf-8")

        state = store.load()

        assert state is not None
        assert state.ai_provider == "manual"
        assert state.gemini_model is None

    def test_models_of_other_providers_are_dropped(self, tmp_path: Path) -> None:
        store = CheckpointStore(tmp_path)
        store.path.parent.mkdir(parents=True)
        store.path.write_text(
            json.dumps({"step": 2, "aiProvider": "gemini", "geminiModel": "g", "openrouterModel": "o"}),
            encoding="utf-8",
        )

        state = store.load()

        assert state is not None
        assert (state.gemini_model, state.openrouter_model) == ("g", None)


class TestReset:
    def test_reset_preserving_provider(self, tmp_path: Path) -> None:
        store = CheckpointStore(tmp_path)

        result = store.reset_preserving_provider(_saved_state())

        assert isinstance(result, Ok)
        loaded = store.load()
        assert loaded is not None
        assert loaded.step is Step.INIT
        assert loaded.working_branch == ""
        assert (loaded.ai_provider, loaded.openrouter_model) == ("openrouter", "minimax/minimax-m2.1")

    def test_clear(self, tmp_path: Path) -> None:
        store = CheckpointStore(tmp_path)
        store.save(_saved_state())

        assert store.clear() == Ok(None)
        assert not store.path.exists()
        assert store.clear() == Ok(None)


def test_failed_write_is_only_a_warning(tmp_path: Path) -> None:
    (tmp_path / ".geeto").write_text("not a directory", encoding="utf-8")
    store = CheckpointStore(tmp_path)
    console = MockConsole()

    assert isinstance(store.save(_saved_state()), Err)
    assert checkpoint_or_warn(store, _saved_state(), console) == Ok(_saved_state())
    assert console.has_warning()
