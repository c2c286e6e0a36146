"""Google Gemini ``generateContent`` provider."""

from __future__ import annotations

from urllib.parse import quote

from geeto.ai.providers.base import ChatProvider, Generation, ModelOption
from geeto.core.result import Err, Ok
from geeto.core.structured import dig

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"


def gemini_url(model: str, api_key: str) -> str:
    return f"{GEMINI_BASE_URL}/{quote(model, safe='')}:generateContent?key={quote(api_key, safe='')}"


class GeminiProvider(ChatProvider):
    id = "gemini"
    display_name = "Gemini"
    default_model = DEFAULT_GEMINI_MODEL
    models = (
        ModelOption(id="gemini-2.5-flash", label="Gemini 2.5 Flash"),
        ModelOption(id="gemini-2.5-flash-lite", label="Gemini 2.5 Flash Lite"),
        ModelOption(id="gemini-2.5-pro", label="Gemini 2.5 Pro"),
    )

    def _complete(self, prompt: str, *, model: str, max_tokens: int) -> Generation:
        if not self._api_key:
            return self._missing_key("gemini.toml")

        result = self._http.post_json(
            gemini_url(model, self._api_key),
            {
                "contents": [{"parts": [{"text": prompt}]}],
                "generationConfig": {"temperature": 0.8, "maxOutputTokens": max(256, max_tokens)},
            },
        )
        if isinstance(result, Err):
            return self._http_error(result.error)

        text = dig(result.value, "candidates", 0, "content", "parts", 0, "text")
        return Ok(text if isinstance(text, str) else None)
