"""OpenRouter chat completions provider."""

from __future__ import annotations

from geeto.ai.http import HttpError
from geeto.ai.providers.base import ChatProvider, Generation, ModelOption, ProviderError
from geeto.core.result import Err, Ok
from geeto.core.structured import dig

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_OPENROUTER_MODEL = "allenai/olmo-3.1-32b-instruct"

_STATUS_MESSAGES = {
    400: "Bad request. Please check your request parameters.",
    401: "Invalid API key. Please check your OpenRouter configuration.",
    402: "Insufficient credits or payment required. Add credits at https://openrouter.ai/",
    403: "Access forbidden. Please check your OpenRouter account permissions.",
    404: "Model not found. The selected model may not be available.",
    429: "Rate limit exceeded. Please wait a moment before trying again.",
}


def describe_status(error: HttpError) -> str:
    if error.status in _STATUS_MESSAGES:
        text = _STATUS_MESSAGES[error.status]
        # keep the provider's own wording, it may carry context-limit details
        if error.status == 400 and error.message:
            text = f"{text} ({error.message})"
    elif error.status >= 500:
        text = f"Server error ({error.status}). Please try again later."
    elif error.status:
        text = f"{error.status} - {error.message}"
    else:
        text = error.message
    return f"OpenRouter API error: {text}"


def chat_text(data: dict[str, object]) -> str | None:
    """``choices[0].message.content`` of an OpenAI-style response."""
    content = dig(data, "choices", 0, "message", "content")
    return content if isinstance(content, str) else None


class OpenRouterProvider(ChatProvider):
    id = "openrouter"
    display_name = "OpenRouter"
    default_model = DEFAULT_OPENROUTER_MODEL
    models = (
        ModelOption(id="allenai/olmo-3.1-32b-instruct", label="OLMo 3.1 32B Instruct"),
        ModelOption(id="minimax/minimax-m2.1", label="MiniMax M2.1"),
        ModelOption(id="meta-llama/llama-3.2-3b-instruct:free", label="Llama 3.2 3B (free)"),
        ModelOption(id="meta-llama/llama-3.1-8b-instruct:free", label="Llama 3.1 8B (free)"),
    )

    def _complete(self, prompt: str, *, model: str, max_tokens: int) -> Generation:
        if not self._api_key:
            return self._missing_key("openrouter.toml")

        result = self._http.post_json(
            OPENROUTER_URL,
            {
                "model": model,
                "messages": [{"role": "user", "content": prompt}],
                "max_tokens": max_tokens,
                "temperature": 0.7,
            },
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "X-Title": "Geeto CLI",
            },
        )
        if isinstance(result, Err):
            return Err(
                ProviderError(
                    provider=self.id,
                    message=describe_status(result.error),
                    status=result.error.status,
                )
            )
        return Ok(chat_text(result.value))
