"""Tests for the branch name and commit message suggestion loop."""

from __future__ import annotations

from geeto.ai.providers.base import MANUAL, AISelection, ProviderError
from geeto.ai.suggest import SuggestionContext, SuggestionKind, build_manual_commit, run_suggestion
from geeto.ai.testing import ScriptedProvider, scripted_registry
from geeto.core.prompter import ScriptedPrompter
from geeto.core.result import Err, Ok
from geeto.output.console import MockConsole

MODEL_A = AISelection(provider="openrouter", model="model-a")
TOO_LARGE_TEXT = "This model's maximum context length is 8192 tokens. However, you requested about 12000 tokens."
LIMIT_MENU = "The changes are too large for this model"


class Harness:
    """One suggestion loop wired to scripted providers."""

    def __init__(self, kind: SuggestionKind, answers: list[object], *, prefix: str = "", single: bool = False) -> None:
        self.openrouter = ScriptedProvider("openrouter", "OpenRouter", ("model-a", "model-b"))
        self.gemini = ScriptedProvider("gemini", "Gemini", ("gem-1",))
        providers = [self.openrouter] if single else [self.openrouter, self.gemini]
        self.prompter = ScriptedPrompter(answers)
        self.console = MockConsole()
        self.selections: list[AISelection] = []
        self.ctx = SuggestionContext(
            kind=kind,
            input_text="diff --git a/app.py b/app.py",
            registry=scripted_registry(*providers),
            prompter=self.prompter,
            console=self.console,
            on_selection=self.selections.append,
            prefix=prefix,
        )

    def run(self, selection: AISelection = MODEL_A):
        return run_suggestion(self.ctx, selection)


# =============================================================================
# Review
# =============================================================================


class TestReview:
    def test_accept_branch(self) -> None:
        h = Harness("branch", ["accept"], prefix="dev#")
        h.openrouter.reply("Add User Login")

        result = h.run()

        assert isinstance(result, Ok)
        assert result.value.value == "dev#add-user-login"
        assert result.value.selection == MODEL_A
        assert "ai: dev#add-user-login" in h.console.messages
        assert "info: Generating branch name with OpenRouter..." in h.console.messages

    def test_change_provider_needs_a_second_provider(self) -> None:
        h = Harness("commit", ["accept"], single=True)
        h.openrouter.reply("feat: add login")

        h.run()

        assert "change_provider" not in h.prompter.offered_for("Suggested commit message")

    def test_regenerate(self) -> None:
        h = Harness("commit", ["regenerate", "accept"])
        h.openrouter.reply("feat: one", "feat: two")

        result = h.run()

        assert isinstance(result, Ok) and result.value.value == "feat: two"
        assert h.openrouter.calls[1].correction is None

    def test_correction_is_sent_to_the_provider(self) -> None:
        h = Harness("commit", ["correct", "make it shorter", "accept"])
        h.openrouter.reply("feat: add the brand new login page", "feat: add login")

        result = h.run()

        assert isinstance(result, Ok) and result.value.value == "feat: add login"
        assert h.openrouter.calls[1].correction == "make it shorter"

    def test_accepting_an_invalid_commit_asks_for_an_edit(self) -> None:
        h = Harness("commit", ["accept", "fix: update stuff"])
        h.openrouter.reply("update stuff")

        result = h.run()

        assert isinstance(result, Ok) and result.value.value == "fix: update stuff"
        assert h.prompter.titles == ["Suggested commit message", "Enter commit message"]
        assert h.console.find("type(scope): description")

    def test_cancel(self) -> None:
        h = Harness("commit", [None])
        h.openrouter.reply("feat: add login")

        result = h.run()

        assert isinstance(result, Err)
        assert result.error.is_cancelled


class TestBranchCleaning:
    def test_cut_off_suffix_is_repaired_once(self) -> None:
        h = Harness("branch", ["accept"], prefix="feat/")
        h.openrouter.reply("add-login-and", "add-login-form")

        result = h.run()

        assert isinstance(result, Ok) and result.value.value == "feat/add-login-form"
        assert h.console.find("looks cut off")
        correction = h.openrouter.calls[1].correction
        assert correction is not None and "add-login-and" in correction

    def test_too_short_counts_as_no_suggestion(self) -> None:
        h = Harness("branch", ["manual", "dev#fix-typo"], prefix="dev#")
        h.openrouter.reply("ab")

        result = h.run()

        assert isinstance(result, Ok) and result.value.value == "dev#fix-typo"
        assert h.prompter.titles == ["OpenRouter (model-a) returned no suggestion", "Enter branch name"]


# =============================================================================
# Context limit
# =============================================================================


class TestContextLimit:
    def test_limit_text_is_never_presented(self) -> None:
        h = Harness("commit", ["edit", "feat", "", "add login"])
        h.openrouter.reply(TOO_LARGE_TEXT)

        result = h.run()

        assert isinstance(result, Ok) and result.value.value == "feat: add login"
        assert h.prompter.titles[0] == LIMIT_MENU
        assert h.prompter.offered_for(LIMIT_MENU) == ("change_model", "change_provider", "edit")
        assert not any(m.startswith("ai: ") for m in h.console.messages)
        assert len(h.openrouter.calls) == 1

    def test_switch_to_a_larger_model(self) -> None:
        h = Harness("commit", ["change_model", "model-b", "accept"])
        h.openrouter.reply(ProviderError(provider="openrouter", message=TOO_LARGE_TEXT), model="model-a")
        h.openrouter.reply("feat: add login", model="model-b")

        result = h.run()

        assert isinstance(result, Ok)
        assert result.value.selection == AISelection(provider="openrouter", model="model-b")
        assert h.selections == [result.value.selection]
        assert h.prompter.offered_for("OpenRouter model") == ("model-b", "model-a", "__back__")

    def test_back_returns_to_the_limit_menu(self) -> None:
        h = Harness("branch", ["change_model", "__back__", "edit", "dev#big-refactor"], prefix="dev#")
        h.openrouter.reply(TOO_LARGE_TEXT)

        result = h.run()

        assert isinstance(result, Ok) and result.value.value == "dev#big-refactor"
        assert h.prompter.titles == [LIMIT_MENU, "OpenRouter model", LIMIT_MENU, "Enter branch name"]


# =============================================================================
# Manual input
# =============================================================================


class TestManual:
    def test_manual_branch_is_validated(self) -> None:
        h = Harness("branch", ["bad name", "dev#fix-typo"], prefix="dev#")

        result = h.run(MANUAL)

        assert isinstance(result, Ok) and result.value.value == "dev#fix-typo"
        assert h.prompter.titles == ["Enter branch name", "Enter branch name"]
        assert h.console.has_error()
        assert h.openrouter.calls == []

    def test_empty_generation_falls_back_to_manual_commit(self) -> None:
        h = Harness("commit", ["manual", "fix", "core", "handle empty diff"])

        result = h.run()

        assert isinstance(result, Ok) and result.value.value == "fix(core): handle empty diff"
        assert h.prompter.titles == [
            "OpenRouter (model-a) returned no suggestion",
            "Commit type",
            "Scope (optional)",
            "Description",
        ]

    def test_cancelled_manual_commit(self) -> None:
        h = Harness("commit", [None])

        result = h.run(MANUAL)

        assert isinstance(result, Err) and result.error.is_cancelled


class TestBuildManualCommit:
    def test_without_scope(self) -> None:
        assert build_manual_commit(ScriptedPrompter(["docs", "", "update readme"])) == "docs: update readme"

    def test_empty_description(self) -> None:
        assert build_manual_commit(ScriptedPrompter(["docs", "", "   "])) is None
