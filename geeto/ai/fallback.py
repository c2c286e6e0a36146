"""Fallback decision loop for failed AI generations.

When a provider returns nothing, a transient failure or a context-limit
failure, the user decides what happens next: retry, another model of the
same provider, another provider, or manual input. The loop is a small state
machine (``menu`` -> ``pick_model`` / ``pick_provider`` -> ``generate`` ->
``menu`` ...) run by ``geeto.core.fsm``; ``fallback_actions`` decides what
the menu offers and is pure so it can be tested without a terminal.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Literal

from geeto.ai.classify import (
    FailureKind,
    classify,
    looks_like_network_failure,
    mentions_billing,
)
from geeto.ai.providers.base import AISelection, Generation, GenerationKind, ProviderId
from geeto.ai.providers.registry import ProviderRegistry, display_name
from geeto.ai.text import extract_commit_title, is_conventional_line, normalize_ai_output
from geeto.core.errors import GeetoError, cancelled
from geeto.core.fsm import StepOutcome, advance, finish, run_state_machine
from geeto.core.prompter import Choice, Prompter
from geeto.core.result import Err, Ok, Result
from geeto.output.console import ConsoleProtocol

__all__ = [
    "Failure",
    "FallbackAction",
    "FallbackOutcome",
    "check_generation",
    "choose_model",
    "choose_provider",
    "fallback_actions",
    "run_fallback",
]

FallbackAction = Literal["retry", "switch_model", "switch_provider", "manual"]
FallbackStep = Literal["menu", "pick_model", "pick_provider", "generate"]

_BACK = "__back__"


@dataclass(frozen=True, slots=True)
class Failure:
    """Why a generation is unusable.

    Attributes:
        kind: Classifier verdict, None for an empty or unrecognised failure
        message: Provider error text, None when the provider returned nothing
    """

    kind: FailureKind | None
    message: str | None = None

    @property
    def is_context_limit(self) -> bool:
        return self.kind is FailureKind.CONTEXT_LIMIT


def check_generation(kind: GenerationKind, generation: Generation) -> str | Failure:
    """Return usable text, or the Failure describing why it is not usable.

    Text that reads like a provider error counts as a failure, except a
    well-formed conventional commit (a commit may legitimately talk about
    rate limits) or a bare kebab-case token (see ``is_transient_failure``).
    """
    match generation:
        case Err(e):
            return Failure(kind=classify(e.message), message=e.message)
        case Ok(None):
            return Failure(kind=None)
        case Ok(text):
            if text is None or not text.strip():
                return Failure(kind=None)
            verdict = classify(text)
            if verdict is None:
                return text
            if kind == "commit" and is_conventional_line(
                extract_commit_title(normalize_ai_output(text))
            ):
                return text
            return Failure(kind=verdict, message=text.strip())


def _current_model(selection: AISelection, registry: ProviderRegistry) -> str | None:
    if selection.model:
        return selection.model
    provider = registry.get(selection.provider)
    return provider.default_model if provider is not None else None


def fallback_actions(
    failure: Failure,
    selection: AISelection,
    registry: ProviderRegistry,
) -> list[FallbackAction]:
    """Ordered menu actions for a failed generation.

    - "switch_model" only when the provider has another model and the error
      is not provider-wide (quota, credits, billing, subscription)
    - "switch_provider" only when another provider is registered
    - "retry" never for a context-limit failure; first when the provider
      gave no suggestion or the network looks flaky; otherwise after the
      switch options
    - "manual" always last
    """
    current = _current_model(selection, registry)
    alternatives = [m for m in registry.models_for(selection.provider) if m.id != current]

    switches: list[FallbackAction] = []
    if alternatives and not mentions_billing(failure.message):
        switches.append("switch_model")
    if any(p != selection.provider for p in registry.ids()):
        switches.append("switch_provider")

    if failure.is_context_limit:
        return [*switches, "manual"]
    if failure.message is None or looks_like_network_failure(failure.message):
        return ["retry", *switches, "manual"]
    return [*switches, "retry", "manual"]


def _failure_title(failure: Failure, selection: AISelection, registry: ProviderRegistry) -> str:
    name = display_name(selection.provider, registry)
    model = _current_model(selection, registry) or "?"
    if failure.message is None:
        return f"{name} ({model}) returned no suggestion"
    if failure.is_context_limit:
        return f"The input is too large for {model}"
    if failure.kind is FailureKind.TRANSIENT:
        return f"{name} ({model}) is rate limited or out of quota"
    return f"{name} returned: {failure.message}"


def choose_model(
    prompter: Prompter,
    registry: ProviderRegistry,
    provider: ProviderId,
    *,
    current: str | None,
    failed_models: frozenset[str],
) -> str | None:
    """Pick a model of ``provider``; None means go back.

    Models that failed this session are listed last and marked, but stay
    selectable.
    """
    models = registry.models_for(provider)
    ordered = sorted(models, key=lambda m: m.id in failed_models)
    choices: list[Choice[str]] = []
    for model in ordered:
        notes = []
        if model.id == current:
            notes.append("current")
        if model.id in failed_models:
            notes.append("failed this session")
        choices.append(Choice(value=model.id, label=model.label, detail=", ".join(notes) or model.id))
    choices.append(Choice(value=_BACK, label="Back"))

    picked = prompter.choose(f"{display_name(provider, registry)} model", choices)
    if picked is None or picked == _BACK:
        return None
    return picked


def choose_provider(
    prompter: Prompter,
    registry: ProviderRegistry,
    *,
    exclude: str | None,
) -> ProviderId | None:
    """Pick another provider; None means go back."""
    choices: list[Choice[str]] = [
        Choice(value=p, label=display_name(p, registry)) for p in registry.ids() if p != exclude
    ]
    choices.append(Choice(value=_BACK, label="Back"))
    picked = prompter.choose("AI provider", choices)
    if picked is None or picked == _BACK:
        return None
    for provider_id in registry.ids():
        if provider_id == picked:
            return provider_id
    return None


@dataclass(frozen=True, slots=True)
class FallbackOutcome:
    """Exit of the fallback loop.

    ``text`` is usable output, or None when the user chose manual input.
    """

    text: str | None
    selection: AISelection
    failed_models: frozenset[str]

    @property
    def manual(self) -> bool:
        return self.text is None


@dataclass(frozen=True, slots=True)
class _FallbackState:
    step: FallbackStep
    selection: AISelection
    failure: Failure
    failed_models: frozenset[str]
    text: str | None = None


@dataclass(frozen=True, slots=True)
class FallbackContext:
    kind: GenerationKind
    input_text: str
    registry: ProviderRegistry
    prompter: Prompter
    console: ConsoleProtocol
    on_selection: Callable[[AISelection], None]
    correction: str | None = None


def _remember_failure(
    failed: frozenset[str], failure: Failure, selection: AISelection, registry: ProviderRegistry
) -> frozenset[str]:
    model = _current_model(selection, registry)
    if model is None or failure.kind is None:
        return failed
    return failed | {model}


def run_fallback(
    ctx: FallbackContext,
    *,
    selection: AISelection,
    failure: Failure,
    failed_models: frozenset[str] = frozenset(),
) -> Result[FallbackOutcome, GeetoError]:
    """Run the fallback menu until usable text, manual input or cancel."""
    registry = ctx.registry

    def step_menu(s: _FallbackState) -> Result[StepOutcome[_FallbackState], GeetoError]:
        labels: dict[FallbackAction, str] = {
            "retry": f"Retry with {_current_model(s.selection, registry)}",
            "switch_model": f"Try another {display_name(s.selection.provider, registry)} model",
            "switch_provider": "Try another AI provider",
            "manual": "Enter it manually",
        }
        actions = fallback_actions(s.failure, s.selection, registry)
        action = ctx.prompter.choose(
            _failure_title(s.failure, s.selection, registry),
            [Choice[FallbackAction](value=a, label=labels[a]) for a in actions],
        )
        match action:
            case None:
                return Err(cancelled("AI generation cancelled"))
            case "retry":
                return Ok(advance(replace(s, step="generate")))
            case "switch_model":
                return Ok(advance(replace(s, step="pick_model")))
            case "switch_provider":
                return Ok(advance(replace(s, step="pick_provider")))
            case "manual":
                return Ok(finish(replace(s, text=None)))

    def step_pick_model(s: _FallbackState) -> Result[StepOutcome[_FallbackState], GeetoError]:
        provider = registry.get(s.selection.provider)
        if provider is None:
            return Ok(advance(replace(s, step="menu")))
        model = choose_model(
            ctx.prompter,
            registry,
            provider.id,
            current=_current_model(s.selection, registry),
            failed_models=s.failed_models,
        )
        if model is None:
            return Ok(advance(replace(s, step="menu")))
        chosen = AISelection(provider=provider.id, model=model)
        ctx.on_selection(chosen)
        return Ok(advance(replace(s, step="generate", selection=chosen)))

    def step_pick_provider(s: _FallbackState) -> Result[StepOutcome[_FallbackState], GeetoError]:
        provider_id = choose_provider(ctx.prompter, registry, exclude=s.selection.provider)
        if provider_id is None:
            return Ok(advance(replace(s, step="menu")))
        chosen = registry.default_selection(provider_id)
        model = choose_model(
            ctx.prompter,
            registry,
            provider_id,
            current=chosen.model,
            failed_models=s.failed_models,
        )
        if model is None:
            return Ok(advance(replace(s, step="menu")))
        chosen = AISelection(provider=provider_id, model=model)
        ctx.on_selection(chosen)
        return Ok(advance(replace(s, step="generate", selection=chosen)))

    def step_generate(s: _FallbackState) -> Result[StepOutcome[_FallbackState], GeetoError]:
        generation = registry.generate(ctx.kind, s.selection, ctx.input_text, ctx.correction)
        checked = check_generation(ctx.kind, generation)
        if isinstance(checked, str):
            return Ok(finish(replace(s, text=checked)))
        if checked.message:
            ctx.console.warning(checked.message)
        failed = _remember_failure(s.failed_models, checked, s.selection, registry)
        return Ok(advance(replace(s, step="menu", failure=checked, failed_models=failed)))

    start = _FallbackState(
        step="menu",
        selection=selection,
        failure=failure,
        failed_models=_remember_failure(failed_models, failure, selection, registry),
    )
    result = run_state_machine(
        initial_state=start,
        get_step=lambda s: s.step,
        handlers={
            "menu": step_menu,
            "pick_model": step_pick_model,
            "pick_provider": step_pick_provider,
            "generate": step_generate,
        },
    )
    if isinstance(result, Err):
        return result
    final = result.value
    return Ok(
        FallbackOutcome(text=final.text, selection=final.selection, failed_models=final.failed_models)
    )
