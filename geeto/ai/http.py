"""HTTP client abstraction for AI provider calls.

This module provides:
- HttpClient: Protocol for JSON POST requests (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol, cast, runtime_checkable

from geeto import __version__
from geeto.core.result import Err, Ok, Result
from geeto.core.structured import as_str_dict, dig, get_str

__all__ = [
    "AI_HTTP_TIMEOUT_SECONDS",
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]

AI_HTTP_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed (query string removed, it may hold keys)
        status: HTTP status code (0 for network errors)
        message: Error text, including the provider's own message when present
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message}"
        return self.message


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for the HTTP calls providers make."""

    def post_json(
        self,
        url: str,
        payload: Mapping[str, object],
        headers: Mapping[str, str] | None = None,
    ) -> Result[dict[str, Any], HttpError]:
        """POST a JSON body and parse a JSON object response.

        Returns:
            Ok with parsed JSON dict, or Err with HttpError
        """
        ...


def _redact(url: str) -> str:
    return url.split("?", 1)[0]


def _error_detail(body: bytes) -> str | None:
    """Pull the provider's message out of an error body like {"error": {"message": ...}}."""
    try:
        obj: object = json.loads(body.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        text = body.decode("utf-8", errors="replace").strip()
        return text[:500] or None
    nested = dig(obj, "error", "message")
    if isinstance(nested, str) and nested.strip():
        return nested.strip()
    table = as_str_dict(obj)
    if table is not None:
        return get_str(table, "error") or get_str(table, "message")
    return None


class RealHttpClient:
    """HTTP client using urllib with system certificates and a timeout."""

    def __init__(
        self,
        timeout: float = AI_HTTP_TIMEOUT_SECONDS,
        user_agent: str = f"geeto/{__version__}",
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def post_json(
        self,
        url: str,
        payload: Mapping[str, object],
        headers: Mapping[str, str] | None = None,
    ) -> Result[dict[str, Any], HttpError]:
        safe_url = _redact(url)
        all_headers = {
            "User-Agent": self.user_agent,
            "Content-Type": "application/json",
            "Accept": "application/json",
            **(headers or {}),
        }
        try:
            req = urllib.request.Request(
                url,
                data=json.dumps(payload).encode("utf-8"),
                headers=all_headers,
                method="POST",
            )
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                raw: bytes = response.read()
        except urllib.error.HTTPError as e:
            detail = _error_detail(e.read())
            message = f"{e.reason}: {detail}" if detail else str(e.reason)
            return Err(HttpError(url=safe_url, status=e.code, message=message))
        except urllib.error.URLError as e:
            return Err(HttpError(url=safe_url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=safe_url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=safe_url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=safe_url, status=0, message=str(e)))

        try:
            data_obj: object = json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(HttpError(url=safe_url, status=0, message=f"JSON parse error: {e}"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(HttpError(url=safe_url, status=0, message="Expected JSON object"))
        return Ok(cast(dict[str, Any], data))


class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are queued per URL; the last one repeats.

    Usage:
        client = MockHttpClient()
        client.set_json(url, {"choices": [...]})
        client.set_json(url, HttpError(url=url, status=429, message="Too Many Requests"))
    """

    def __init__(self) -> None:
        self._responses: dict[str, list[dict[str, Any] | HttpError]] = {}
        self.calls: list[tuple[str, dict[str, object], dict[str, str]]] = []

    def set_json(self, url: str, *responses: dict[str, Any] | HttpError) -> None:
        self._responses[url] = list(responses)

    def post_json(
        self,
        url: str,
        payload: Mapping[str, object],
        headers: Mapping[str, str] | None = None,
    ) -> Result[dict[str, Any], HttpError]:
        self.calls.append((url, dict(payload), dict(headers or {})))

        queue = self._responses.get(url)
        if not queue:
            return Err(HttpError(url=_redact(url), status=404, message="Not found (mock)"))
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)
