"""Tests for geeto.output.console."""

from __future__ import annotations

import pytest

from geeto.output.console import ConsoleProtocol, MockConsole, RichConsole, Style


class TestMockConsole:
    def test_prefixes_by_kind(self) -> None:
        console = MockConsole()
        console.success("done")
        console.error("bad")
        console.warning("careful")
        console.info("fyi")
        console.suggestion("feat: add x")

        assert console.messages == [
            "OK done",
            "error: bad",
            "warning: careful",
            "info: fyi",
            "ai: feat: add x",
        ]

    def test_style_helpers(self) -> None:
        console = MockConsole()
        console.warning("w")
        assert console.has_warning()
        assert not console.has_error()
        assert not console.has_success()
        assert console.count(Style.WARNING) == 1

    def test_find_and_clear(self) -> None:
        console = MockConsole()
        console.print("checkpoint saved")
        console.header("Push")
        assert len(console.find("checkpoint")) == 1
        assert "Push" in console.text
        console.clear()
        assert console.outputs == []


class TestRichConsole:
    def test_error_is_one_line(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().error("Branch 'feat/[x]' does not exist")
        out = capsys.readouterr().out
        assert out.strip().splitlines() == ["error: Branch 'feat/[x]' does not exist"]

    def test_print_does_not_interpret_markup(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().print("[bold]literal[/bold]", Style.DIM)
        assert "[bold]literal[/bold]" in capsys.readouterr().out


def test_both_consoles_satisfy_protocol() -> None:
    consoles: list[ConsoleProtocol] = [MockConsole(), RichConsole()]
    assert len(consoles) == 2
