"""Provider protocol and shared types.

Every AI backend exposes the same three generation calls. A call returns
``Ok(text)``, ``Ok(None)`` when the model produced nothing usable, or
``Err(ProviderError)``. Error text is kept verbatim so the failure
classifier can read it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal, Protocol

from geeto.ai.http import HttpClient, HttpError
from geeto.ai.providers.prompts import branch_prompt, commit_prompt, release_notes_prompt
from geeto.core.result import Err, Ok, Result

__all__ = [
    "AISelection",
    "ChatProvider",
    "Generation",
    "GenerationKind",
    "MANUAL",
    "ModelOption",
    "Provider",
    "ProviderChoice",
    "ProviderError",
    "ProviderId",
]

ProviderId = Literal["gemini", "copilot", "openrouter"]
ProviderChoice = ProviderId | Literal["manual"]
GenerationKind = Literal["branch", "commit", "release_notes"]

PROVIDER_IDS: tuple[ProviderId, ...] = ("copilot", "gemini", "openrouter")


@dataclass(frozen=True, slots=True)
class ModelOption:
    id: str
    label: str


@dataclass(frozen=True, slots=True)
class ProviderError:
    """A failed generation call.

    Attributes:
        provider: Provider id
        message: Error text (classified by ``geeto.ai.classify``)
        status: HTTP status, 0 when not applicable
    """

    provider: str
    message: str
    status: int = 0

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class AISelection:
    """Which provider and model generate text. ``manual`` skips AI entirely."""

    provider: ProviderChoice
    model: str | None = None

    @property
    def is_manual(self) -> bool:
        return self.provider == "manual"


MANUAL = AISelection(provider="manual")

type Generation = Result[str | None, ProviderError]


class Provider(Protocol):
    """An AI backend."""

    @property
    def id(self) -> ProviderId: ...

    @property
    def display_name(self) -> str: ...

    @property
    def models(self) -> tuple[ModelOption, ...]: ...

    @property
    def default_model(self) -> str: ...

    def generate_branch_name(
        self, context: str, *, model: str, correction: str | None = None
    ) -> Generation: ...

    def generate_commit_message(
        self, diff: str, *, model: str, correction: str | None = None
    ) -> Generation: ...

    def generate_release_notes(
        self, log: str, *, model: str, correction: str | None = None
    ) -> Generation: ...


class ChatProvider(ABC):
    """Base for providers that turn one prompt into one completion.

    Subclasses only implement ``_complete``; prompt wording and output
    trimming are shared.
    """

    id: ProviderId
    display_name: str
    models: tuple[ModelOption, ...]
    default_model: str

    def __init__(self, http: HttpClient, api_key: str | None) -> None:
        self._http = http
        self._api_key = api_key

    @abstractmethod
    def _complete(self, prompt: str, *, model: str, max_tokens: int) -> Generation: ...

    def _missing_key(self, config_file: str) -> Err[ProviderError]:
        return Err(
            ProviderError(
                provider=self.id,
                message=f"{self.display_name} is not configured (add a key to .geeto/{config_file})",
            )
        )

    def _http_error(self, error: HttpError) -> Err[ProviderError]:
        return Err(ProviderError(provider=self.id, message=str(error), status=error.status))

    def _run(self, prompt: str, *, model: str, max_tokens: int) -> Generation:
        result = self._complete(prompt, model=model, max_tokens=max_tokens)
        if isinstance(result, Err):
            return result
        text = (result.value or "").strip()
        return Ok(text or None)

    def generate_branch_name(
        self, context: str, *, model: str, correction: str | None = None
    ) -> Generation:
        return self._run(branch_prompt(context, correction), model=model, max_tokens=150)

    def generate_commit_message(
        self, diff: str, *, model: str, correction: str | None = None
    ) -> Generation:
        return self._run(commit_prompt(diff, correction), model=model, max_tokens=200)

    def generate_release_notes(
        self, log: str, *, model: str, correction: str | None = None
    ) -> Generation:
        return self._run(release_notes_prompt(log, correction), model=model, max_tokens=800)
