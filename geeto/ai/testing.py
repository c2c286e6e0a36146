"""Scripted AI provider for tests.

``ScriptedProvider`` replays queued generations instead of calling an API.
Replies can be registered for every model or for one model; the last reply
of a queue repeats. A provider with nothing queued returns ``Ok(None)``.

    openrouter = ScriptedProvider("openrouter", "OpenRouter", ("model-a", "model-b"))
    openrouter.reply("Rate limit exceeded", model="model-a")
    openrouter.reply("feat: add login", model="model-b")
    registry = scripted_registry(openrouter)
"""

from __future__ import annotations

from dataclasses import dataclass

from geeto.ai.providers.base import Generation, ModelOption, ProviderError, ProviderId
from geeto.ai.providers.registry import ProviderRegistry
from geeto.core.result import Err, Ok

__all__ = ["ProviderCall", "ScriptedProvider", "scripted_registry"]

type Reply = Generation | ProviderError | str | None


def _as_generation(reply: Reply) -> Generation:
    match reply:
        case ProviderError():
            return Err(reply)
        case str() | None:
            return Ok(reply)
        case _:
            return reply


@dataclass(frozen=True, slots=True)
class ProviderCall:
    kind: str
    model: str
    text: str
    correction: str | None


class ScriptedProvider:
    def __init__(self, provider_id: ProviderId, name: str, model_ids: tuple[str, ...]) -> None:
        self.id: ProviderId = provider_id
        self.display_name = name
        self.models = tuple(ModelOption(id=m, label=m) for m in model_ids)
        self.default_model = model_ids[0]
        self._queues: dict[str | None, list[Generation]] = {}
        self.calls: list[ProviderCall] = []

    def reply(self, *replies: Reply, model: str | None = None) -> ScriptedProvider:
        """Queue replies for ``model`` (every model when None)."""
        self._queues[model] = [_as_generation(r) for r in replies]
        return self

    def _next(self, kind: str, text: str, model: str, correction: str | None) -> Generation:
        self.calls.append(ProviderCall(kind=kind, model=model, text=text, correction=correction))
        queue = self._queues.get(model) or self._queues.get(None)
        if not queue:
            return Ok(None)
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def generate_branch_name(
        self, context: str, *, model: str, correction: str | None = None
    ) -> Generation:
        return self._next("branch", context, model, correction)

    def generate_commit_message(
        self, diff: str, *, model: str, correction: str | None = None
    ) -> Generation:
        return self._next("commit", diff, model, correction)

    def generate_release_notes(
        self, log: str, *, model: str, correction: str | None = None
    ) -> Generation:
        return self._next("release_notes", log, model, correction)

    # Test helpers

    @property
    def models_called(self) -> list[str]:
        return [c.model for c in self.calls]


def scripted_registry(*providers: ScriptedProvider) -> ProviderRegistry:
    return ProviderRegistry({p.id: p for p in providers})
