"""Tests for geeto.cli.helpers and geeto.cli.context."""

from __future__ import annotations

from pathlib import Path

import pytest
import typer

from geeto.cli.context import build_context, resolve_project_root
from geeto.cli.helpers import exit_with_error, value_or_exit
from geeto.core.errors import GeetoError, cancelled
from geeto.core.result import Err, Ok
from geeto.output.console import MockConsole


class TestExitWithError:
    def test_cancel_exits_cleanly(self) -> None:
        console = MockConsole()
        with pytest.raises(typer.Exit) as exc:
            exit_with_error(cancelled("Push cancelled by user"), console)
        assert exc.value.exit_code == 0
        assert console.messages == ["info: Push cancelled by user"]

    def test_error_and_hint(self) -> None:
        console = MockConsole()
        error = GeetoError(kind="io_failed", message="failed to write checkpoint", hint="check permissions")
        with pytest.raises(typer.Exit) as exc:
            exit_with_error(error, console)
        assert exc.value.exit_code == 5
        assert console.messages == ["error: failed to write checkpoint", "hint: check permissions"]

    def test_git_conflict_code(self) -> None:
        with pytest.raises(typer.Exit) as exc:
            exit_with_error(GeetoError(kind="git_conflict", message="conflict"), MockConsole())
        assert exc.value.exit_code == 2


def test_value_or_exit() -> None:
    console = MockConsole()
    assert value_or_exit(Ok(3), console) == 3
    with pytest.raises(typer.Exit):
        value_or_exit(Err(GeetoError(kind="validation", message="bad")), console)


class TestProjectRoot:
    def test_explicit_project(self, tmp_path: Path) -> None:
        assert resolve_project_root(tmp_path) == Ok(tmp_path.resolve())

    def test_project_must_be_a_directory(self, tmp_path: Path) -> None:
        file = tmp_path / "file.txt"
        file.write_text("x", encoding="utf-8")

        result = resolve_project_root(file)

        assert isinstance(result, Err)
        assert result.error.kind == "io_failed"

    def test_build_context_uses_the_project_store(self, tmp_path: Path) -> None:
        cli = build_context(tmp_path, MockConsole())
        assert cli.root == tmp_path.resolve()
        assert cli.store.path == tmp_path.resolve() / ".geeto" / "geeto-state.json"
