"""Provider registry: the single place that maps a selection to a backend."""

from __future__ import annotations

from collections.abc import Mapping

from geeto.ai.http import HttpClient
from geeto.ai.providers.base import (
    PROVIDER_IDS,
    AISelection,
    Generation,
    GenerationKind,
    ModelOption,
    Provider,
    ProviderChoice,
    ProviderError,
    ProviderId,
)
from geeto.ai.providers.copilot import CopilotProvider
from geeto.ai.providers.gemini import GeminiProvider
from geeto.ai.providers.openrouter import OpenRouterProvider
from geeto.core.config import ProviderConfig
from geeto.core.result import Err

__all__ = ["ProviderRegistry", "display_name"]


_BUILTIN_NAMES: dict[str, str] = {
    "copilot": CopilotProvider.display_name,
    "gemini": GeminiProvider.display_name,
    "openrouter": OpenRouterProvider.display_name,
}


def display_name(choice: ProviderChoice, registry: ProviderRegistry | None = None) -> str:
    if choice == "manual":
        return "Manual"
    if registry is not None:
        provider = registry.get(choice)
        if provider is not None:
            return provider.display_name
    return _BUILTIN_NAMES.get(choice, choice.capitalize())


class ProviderRegistry:
    """Known providers keyed by id."""

    def __init__(self, providers: Mapping[ProviderId, Provider]) -> None:
        self._providers = dict(providers)

    @classmethod
    def from_config(cls, config: ProviderConfig, http: HttpClient) -> ProviderRegistry:
        return cls(
            {
                "copilot": CopilotProvider(http, config.github_token),
                "gemini": GeminiProvider(http, config.gemini_api_key),
                "openrouter": OpenRouterProvider(http, config.openrouter_api_key),
            }
        )

    def get(self, provider_id: ProviderChoice) -> Provider | None:
        if provider_id == "manual":
            return None
        return self._providers.get(provider_id)

    def ids(self) -> list[ProviderId]:
        return [p for p in PROVIDER_IDS if p in self._providers]

    def models_for(self, provider_id: ProviderChoice) -> tuple[ModelOption, ...]:
        provider = self.get(provider_id)
        return provider.models if provider is not None else ()

    def default_selection(self, provider_id: ProviderChoice) -> AISelection:
        provider = self.get(provider_id)
        if provider is None:
            return AISelection(provider="manual")
        return AISelection(provider=provider.id, model=provider.default_model)

    def generate(
        self,
        kind: GenerationKind,
        selection: AISelection,
        text: str,
        correction: str | None = None,
    ) -> Generation:
        """Run one generation with the selected provider and model."""
        provider = self.get(selection.provider)
        if provider is None:
            return Err(
                ProviderError(
                    provider=selection.provider,
                    message=f"no AI provider available for '{selection.provider}'",
                )
            )
        model = selection.model or provider.default_model
        match kind:
            case "branch":
                return provider.generate_branch_name(text, model=model, correction=correction)
            case "commit":
                return provider.generate_commit_message(text, model=model, correction=correction)
            case "release_notes":
                return provider.generate_release_notes(text, model=model, correction=correction)
