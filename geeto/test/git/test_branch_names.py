"""Tests for geeto.git.branch_names."""

from __future__ import annotations

import pytest

from geeto.core.result import Err, Ok
from geeto.git.branch_names import (
    branch_prefix,
    clean_branch_suffix,
    is_incomplete_suffix,
    is_protected_branch,
    recommended_separator,
    validate_branch_name,
)


class TestValidateBranchName:
    @pytest.mark.parametrize(
        "name",
        ["dev#add-login", "feat/add-login", "release-1.2", "fix_typo", "a"],
    )
    def test_valid(self, name: str) -> None:
        assert validate_branch_name(name) == Ok(name)

    @pytest.mark.parametrize(
        "name",
        [
            "",
            "x" * 256,
            "has space",
            "tilde~1",
            "caret^",
            "colon:name",
            "what?",
            "star*",
            "open[bracket",
            "back\\slash",
            "HEAD",
            "ORIG_HEAD",
            "FETCH_HEAD",
            "MERGE_HEAD",
            "CHERRY_PICK_HEAD",
            ".hidden",
            "trailing.",
            "/leading",
            "trailing/",
            "double..dot",
            "at@{brace",
            "locked.lock",
        ],
    )
    def test_invalid(self, name: str) -> None:
        result = validate_branch_name(name)
        assert isinstance(result, Err)
        assert result.error.kind == "validation"

    def test_max_length_is_allowed(self) -> None:
        assert isinstance(validate_branch_name("x" * 255), Ok)


class TestPrefix:
    def test_keeps_existing_prefix(self) -> None:
        assert branch_prefix("feat/login", "#") == "feat/"
        assert branch_prefix("dev#login", "/") == "dev#"

    def test_known_branches(self) -> None:
        assert branch_prefix("main", "#") == "release#"
        assert branch_prefix("development", "/") == "dev/"
        assert branch_prefix("staging", "#") == "stage#"

    def test_default(self) -> None:
        assert branch_prefix("something", "#") == "dev#"
        assert branch_prefix(None, "/") == "dev/"

    def test_separator_follows_the_repository(self) -> None:
        assert recommended_separator(["main", "feat/a", "fix/b", "dev#c"]) == "/"
        assert recommended_separator(["main", "dev#a"]) == "#"
        assert recommended_separator([]) == "#"


class TestSuffix:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Add User Authentication", "add-user-authentication"),
            ("fix: booking__validation!!", "fix-booking-validation"),
            ("  --update navbar--  ", "update-navbar"),
            ("first line\nsecond line", "first-line"),
            ("", ""),
        ],
    )
    def test_clean(self, raw: str, expected: str) -> None:
        assert clean_branch_suffix(raw) == expected

    def test_clean_with_underscores(self) -> None:
        assert clean_branch_suffix("Add user auth", "_") == "add_user_auth"

    @pytest.mark.parametrize("suffix", ["add-login-and", "support-for", "update-with", "fix_the"])
    def test_incomplete(self, suffix: str) -> None:
        assert is_incomplete_suffix(suffix)

    @pytest.mark.parametrize("suffix", ["add-login", "brand-new-landing", "fix-android"])
    def test_complete(self, suffix: str) -> None:
        assert not is_incomplete_suffix(suffix)


@pytest.mark.parametrize("name", ["main", "master", "development", "develop", "dev", "Main"])
def test_protected(name: str) -> None:
    assert is_protected_branch(name)


def test_feature_branch_is_not_protected() -> None:
    assert not is_protected_branch("dev#add-login")
