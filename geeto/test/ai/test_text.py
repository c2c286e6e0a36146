"""Tests for geeto.ai.text."""

from __future__ import annotations

import pytest

from geeto.ai.text import (
    MAX_COMMIT_TITLE_LENGTH,
    extract_commit_title,
    format_commit_message,
    is_conventional_line,
    normalize_ai_output,
    strip_decorations,
    validate_commit_message,
)
from geeto.core.result import Err, Ok


class TestCleaning:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("```\nfeat: add login\n```", "feat: add login"),
            ("```text\nfix: typo\n```", "fix: typo"),
            ("`docs: update readme`", "docs: update readme"),
            ("\"'chore: bump deps'\"", "chore: bump deps"),
        ],
    )
    def test_strip_decorations(self, raw: str, expected: str) -> None:
        assert strip_decorations(raw) == expected

    def test_preamble_is_dropped(self) -> None:
        assert normalize_ai_output("Sure! Here it is: feat(api): add x") == "feat(api): add x"

    def test_text_without_a_type_is_kept(self) -> None:
        assert normalize_ai_output("  update stuff  ") == "update stuff"

    def test_extract_title(self) -> None:
        assert extract_commit_title("\n\nfeat: x\n\nbody text") == "feat: x"
        assert extract_commit_title("   \n") == ""


class TestConventional:
    @pytest.mark.parametrize(
        "line",
        ["feat: add login", "fix(auth): resolve token refresh", "feat!: drop old api", "ci(gh-actions): cache deps"],
    )
    def test_valid(self, line: str) -> None:
        assert is_conventional_line(line)

    @pytest.mark.parametrize(
        "line",
        ["Feat: add login", "feat:add login", "feat(): empty scope", "feature: add login", "update stuff"],
    )
    def test_invalid(self, line: str) -> None:
        assert not is_conventional_line(line)


class TestValidateCommitMessage:
    def test_ok_is_stripped(self) -> None:
        assert validate_commit_message("  feat: add login\n\nbody\n") == Ok("feat: add login\n\nbody")

    def test_empty(self) -> None:
        result = validate_commit_message("   ")
        assert isinstance(result, Err)
        assert result.error.message == "Commit message cannot be empty"

    def test_not_conventional_has_a_hint(self) -> None:
        result = validate_commit_message("added login")
        assert isinstance(result, Err)
        assert result.error.hint is not None and "feat" in result.error.hint

    def test_title_too_long(self) -> None:
        title = "feat: " + "x" * MAX_COMMIT_TITLE_LENGTH
        result = validate_commit_message(title)
        assert isinstance(result, Err)
        assert result.error.kind == "validation"


def test_format_commit_message() -> None:
    assert format_commit_message("feat", " api ", " add x ") == "feat(api): add x"
    assert format_commit_message("fix", "", "typo") == "fix: typo"
    assert format_commit_message("fix", None, "typo") == "fix: typo"
