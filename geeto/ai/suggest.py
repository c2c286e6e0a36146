"""Branch name and commit message suggestion loop.

The loop generates a suggestion, lets the user accept, regenerate, correct
or edit it, and routes failures: a context-limit failure to the ``limit``
menu (no same-model retry), anything else that is unusable to the fallback
loop. The selected provider skips AI entirely when it is ``manual``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Literal

from geeto.ai.fallback import (
    Failure,
    FallbackContext,
    check_generation,
    choose_model,
    choose_provider,
    run_fallback,
)
from geeto.ai.providers.base import AISelection
from geeto.ai.providers.registry import ProviderRegistry, display_name
from geeto.ai.text import (
    COMMIT_TYPES,
    format_commit_message,
    normalize_ai_output,
    strip_decorations,
    validate_commit_message,
)
from geeto.core.errors import GeetoError, cancelled
from geeto.core.fsm import StepOutcome, advance, finish, run_state_machine
from geeto.core.prompter import Choice, Prompter
from geeto.core.result import Err, Ok, Result
from geeto.git.branch_names import (
    clean_branch_suffix,
    is_incomplete_suffix,
    validate_branch_name,
)
from geeto.output.console import ConsoleProtocol

__all__ = [
    "Suggestion",
    "SuggestionContext",
    "SuggestionKind",
    "build_manual_commit",
    "run_suggestion",
]

SuggestionKind = Literal["branch", "commit"]
SuggestStep = Literal[
    "generate", "fallback", "review", "limit", "correct", "edit", "pick_model", "pick_provider"
]
ReviewAction = Literal[
    "accept", "regenerate", "correct", "edit", "change_model", "change_provider"
]
LimitAction = Literal["change_model", "change_provider", "edit"]

MIN_SUFFIX_LENGTH = 3


@dataclass(frozen=True, slots=True)
class Suggestion:
    value: str
    selection: AISelection


@dataclass(frozen=True, slots=True)
class SuggestionContext:
    """Inputs for one suggestion loop.

    Attributes:
        kind: "branch" or "commit"
        input_text: Diff (or file list) handed to the provider
        prefix: Branch prefix prepended to the cleaned suffix (branch only)
        on_selection: Called with every new provider/model choice
    """

    kind: SuggestionKind
    input_text: str
    registry: ProviderRegistry
    prompter: Prompter
    console: ConsoleProtocol
    on_selection: Callable[[AISelection], None]
    prefix: str = ""


@dataclass(frozen=True, slots=True)
class _SuggestState:
    step: SuggestStep
    selection: AISelection
    suggestion: str | None = None
    correction: str | None = None
    failure: Failure | None = None
    failed_models: frozenset[str] = frozenset()
    repaired: bool = False


def build_manual_commit(prompter: Prompter) -> str | None:
    """Assemble a conventional commit from type, scope and description."""
    commit_type = prompter.choose(
        "Commit type",
        [Choice(value=name, label=name, detail=description) for name, description in COMMIT_TYPES],
    )
    if commit_type is None:
        return None
    scope = prompter.text("Scope (optional)")
    if scope is None:
        return None
    description = prompter.text("Description")
    if description is None or not description.strip():
        return None
    return format_commit_message(commit_type, scope, description)


def _validate(kind: SuggestionKind, value: str) -> Result[str, GeetoError]:
    if kind == "branch":
        return validate_branch_name(value.strip())
    return validate_commit_message(value)


def _clean(ctx: SuggestionContext, raw: str) -> str | None:
    if ctx.kind == "commit":
        text = normalize_ai_output(raw)
        return text or None
    suffix = clean_branch_suffix(strip_decorations(raw))
    if len(suffix) < MIN_SUFFIX_LENGTH:
        return None
    return suffix


def run_suggestion(
    ctx: SuggestionContext, selection: AISelection
) -> Result[Suggestion, GeetoError]:
    """Run the suggestion loop until the user accepts a value or cancels."""
    registry = ctx.registry
    what = "branch name" if ctx.kind == "branch" else "commit message"

    def present(s: _SuggestState, raw: str) -> StepOutcome[_SuggestState]:
        cleaned = _clean(ctx, raw)
        if cleaned is None:
            return advance(replace(s, step="fallback", failure=Failure(kind=None)))
        if ctx.kind == "branch" and is_incomplete_suffix(cleaned) and not s.repaired:
            ctx.console.info(f"Suggestion '{cleaned}' looks cut off, asking again")
            return advance(
                replace(
                    s,
                    step="generate",
                    repaired=True,
                    correction=f"'{cleaned}' is cut off. Return a complete, short branch suffix.",
                )
            )
        value = f"{ctx.prefix}{cleaned}" if ctx.kind == "branch" else cleaned
        return advance(replace(s, step="review", suggestion=value, correction=None, failure=None))

    def back_from_picker(s: _SuggestState) -> StepOutcome[_SuggestState]:
        return advance(replace(s, step="review" if s.suggestion else "limit"))

    def switched(s: _SuggestState, chosen: AISelection) -> StepOutcome[_SuggestState]:
        ctx.on_selection(chosen)
        return advance(replace(s, step="generate", selection=chosen, repaired=False))

    def step_generate(s: _SuggestState) -> Result[StepOutcome[_SuggestState], GeetoError]:
        if s.selection.is_manual:
            return Ok(advance(replace(s, step="edit")))
        ctx.console.info(f"Generating {what} with {display_name(s.selection.provider, registry)}...")
        generation = registry.generate(ctx.kind, s.selection, ctx.input_text, s.correction)
        checked = check_generation(ctx.kind, generation)
        if isinstance(checked, str):
            return Ok(present(s, checked))
        if checked.is_context_limit:
            model = s.selection.model or registry.default_selection(s.selection.provider).model
            failed = s.failed_models | {model} if model else s.failed_models
            return Ok(advance(replace(s, step="limit", failure=checked, failed_models=failed)))
        return Ok(advance(replace(s, step="fallback", failure=checked)))

    def step_fallback(s: _SuggestState) -> Result[StepOutcome[_SuggestState], GeetoError]:
        outcome = run_fallback(
            FallbackContext(
                kind=ctx.kind,
                input_text=ctx.input_text,
                registry=registry,
                prompter=ctx.prompter,
                console=ctx.console,
                on_selection=ctx.on_selection,
                correction=s.correction,
            ),
            selection=s.selection,
            failure=s.failure or Failure(kind=None),
            failed_models=s.failed_models,
        )
        if isinstance(outcome, Err):
            return outcome
        result = outcome.value
        s = replace(s, selection=result.selection, failed_models=result.failed_models)
        if result.text is None:
            return Ok(advance(replace(s, step="edit", suggestion=None, failure=None)))
        return Ok(present(s, result.text))

    def step_review(s: _SuggestState) -> Result[StepOutcome[_SuggestState], GeetoError]:
        assert s.suggestion is not None
        ctx.console.suggestion(s.suggestion)
        choices: list[Choice[ReviewAction]] = [
            Choice(value="accept", label="Accept"),
            Choice(value="regenerate", label="Regenerate"),
            Choice(value="correct", label="Ask for a correction"),
            Choice(value="edit", label="Edit"),
            Choice(value="change_model", label="Change model"),
        ]
        if len(registry.ids()) > 1:
            choices.append(Choice(value="change_provider", label="Change AI provider"))
        action = ctx.prompter.choose(f"Suggested {what}", choices)
        match action:
            case None:
                return Err(cancelled(f"{what.capitalize()} cancelled"))
            case "accept":
                checked = _validate(ctx.kind, s.suggestion)
                if isinstance(checked, Err):
                    ctx.console.error(checked.error.message)
                    return Ok(advance(replace(s, step="edit")))
                return Ok(finish(replace(s, suggestion=checked.value)))
            case "regenerate":
                return Ok(advance(replace(s, step="generate", correction=None, repaired=False)))
            case "correct":
                return Ok(advance(replace(s, step="correct")))
            case "edit":
                return Ok(advance(replace(s, step="edit")))
            case "change_model":
                return Ok(advance(replace(s, step="pick_model")))
            case "change_provider":
                return Ok(advance(replace(s, step="pick_provider")))

    def step_limit(s: _SuggestState) -> Result[StepOutcome[_SuggestState], GeetoError]:
        choices: list[Choice[LimitAction]] = []
        if len(registry.models_for(s.selection.provider)) > 1:
            choices.append(Choice(value="change_model", label="Use a model with a larger context"))
        if any(p != s.selection.provider for p in registry.ids()):
            choices.append(Choice(value="change_provider", label="Use another AI provider"))
        choices.append(Choice(value="edit", label=f"Write the {what} myself"))
        action = ctx.prompter.choose(
            "The changes are too large for this model",
            choices,
            subtitle=s.failure.message if s.failure else None,
        )
        match action:
            case None:
                return Err(cancelled(f"{what.capitalize()} cancelled"))
            case "change_model":
                return Ok(advance(replace(s, step="pick_model")))
            case "change_provider":
                return Ok(advance(replace(s, step="pick_provider")))
            case "edit":
                return Ok(advance(replace(s, step="edit")))

    def step_correct(s: _SuggestState) -> Result[StepOutcome[_SuggestState], GeetoError]:
        feedback = ctx.prompter.text("What should change?")
        if feedback is None or not feedback.strip():
            return Ok(advance(replace(s, step="review")))
        return Ok(
            advance(replace(s, step="generate", correction=feedback.strip(), repaired=False))
        )

    def step_edit(s: _SuggestState) -> Result[StepOutcome[_SuggestState], GeetoError]:
        if ctx.kind == "commit" and s.suggestion is None:
            value = build_manual_commit(ctx.prompter)
        else:
            value = ctx.prompter.text(
                f"Enter {what}", default=s.suggestion or ctx.prefix
            )
        if value is None:
            if s.suggestion is not None:
                return Ok(advance(replace(s, step="review")))
            return Err(cancelled(f"{what.capitalize()} cancelled"))
        checked = _validate(ctx.kind, value)
        if isinstance(checked, Err):
            ctx.console.error(checked.error.message)
            if checked.error.hint:
                ctx.console.info(checked.error.hint)
            return Ok(advance(replace(s, step="edit")))
        return Ok(finish(replace(s, suggestion=checked.value)))

    def step_pick_model(s: _SuggestState) -> Result[StepOutcome[_SuggestState], GeetoError]:
        provider = registry.get(s.selection.provider)
        if provider is None:
            return Ok(back_from_picker(s))
        model = choose_model(
            ctx.prompter,
            registry,
            provider.id,
            current=s.selection.model or provider.default_model,
            failed_models=s.failed_models,
        )
        if model is None:
            return Ok(back_from_picker(s))
        return Ok(switched(s, AISelection(provider=provider.id, model=model)))

    def step_pick_provider(s: _SuggestState) -> Result[StepOutcome[_SuggestState], GeetoError]:
        provider_id = choose_provider(ctx.prompter, registry, exclude=s.selection.provider)
        if provider_id is None:
            return Ok(back_from_picker(s))
        model = choose_model(
            ctx.prompter,
            registry,
            provider_id,
            current=registry.default_selection(provider_id).model,
            failed_models=s.failed_models,
        )
        if model is None:
            return Ok(back_from_picker(s))
        return Ok(switched(s, AISelection(provider=provider_id, model=model)))

    result = run_state_machine(
        initial_state=_SuggestState(step="generate", selection=selection),
        get_step=lambda s: s.step,
        handlers={
            "generate": step_generate,
            "fallback": step_fallback,
            "review": step_review,
            "limit": step_limit,
            "correct": step_correct,
            "edit": step_edit,
            "pick_model": step_pick_model,
            "pick_provider": step_pick_provider,
        },
    )
    if isinstance(result, Err):
        return result
    final = result.value
    assert final.suggestion is not None
    return Ok(Suggestion(value=final.suggestion, selection=final.selection))
