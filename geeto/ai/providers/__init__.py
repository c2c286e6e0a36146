"""AI providers behind a common protocol."""

from geeto.ai.providers.base import (
    MANUAL,
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
from geeto.ai.providers.registry import ProviderRegistry, display_name

__all__ = [
    "AISelection",
    "CopilotProvider",
    "GeminiProvider",
    "Generation",
    "GenerationKind",
    "MANUAL",
    "ModelOption",
    "OpenRouterProvider",
    "Provider",
    "ProviderChoice",
    "ProviderError",
    "ProviderId",
    "ProviderRegistry",
    "display_name",
]
