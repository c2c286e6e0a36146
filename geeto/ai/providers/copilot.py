"""GitHub-hosted models, authenticated with a GitHub token."""

from __future__ import annotations

from geeto.ai.providers.base import ChatProvider, Generation, ModelOption
from geeto.ai.providers.openrouter import chat_text
from geeto.core.result import Err, Ok

GITHUB_MODELS_URL = "https://models.github.ai/inference/chat/completions"
DEFAULT_COPILOT_MODEL = "openai/gpt-4.1-mini"


class CopilotProvider(ChatProvider):
    id = "copilot"
    display_name = "GitHub (Recommended)"
    default_model = DEFAULT_COPILOT_MODEL
    models = (
        ModelOption(id="openai/gpt-4.1-mini", label="GPT-4.1 mini"),
        ModelOption(id="openai/gpt-4.1", label="GPT-4.1"),
        ModelOption(id="openai/gpt-5", label="GPT-5"),
    )

    def _complete(self, prompt: str, *, model: str, max_tokens: int) -> Generation:
        if not self._api_key:
            return self._missing_key("copilot.toml")

        result = self._http.post_json(
            GITHUB_MODELS_URL,
            {
                "model": model,
                "messages": [{"role": "user", "content": prompt}],
                "max_tokens": max_tokens,
                "temperature": 0.7,
            },
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )
        if isinstance(result, Err):
            return self._http_error(result.error)
        return Ok(chat_text(result.value))
