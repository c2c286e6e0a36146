"""Heuristic classification of AI provider failures.

Provider error text is free-form prose, so these are case-insensitive
pattern checks rather than exact matches. They are tuned against a table of
real error strings (see the tests) and are not expected to be exhaustive.
"""

from __future__ import annotations

import re
from enum import Enum

__all__ = [
    "FailureKind",
    "classify",
    "is_context_limit_failure",
    "is_transient_failure",
    "looks_like_network_failure",
    "mentions_billing",
]


class FailureKind(Enum):
    TRANSIENT = "transient"
    CONTEXT_LIMIT = "context_limit"


_MODEL_ID = re.compile(r"^[a-z0-9_-]+$")

_TRANSIENT_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"rate[\s_-]?limit(ed)?",
        r"quota",
        r"insufficient\s+credits?|out\s+of\s+credits|out_of_credits",
        r"payment\s+required|payment\s+failed|billing",
        r"subscription\s+required|requires\s+subscription|must\s+upgrade|upgrade\s+required",
        r"not a valid model|model not found|invalid model id|model.*not found",
    )
)

_BILLING = re.compile(r"quota|insufficient|payment|subscription|billing", re.IGNORECASE)

_NETWORK = re.compile(
    r"network|timed?\s*out|timeout|connection|econnreset|enotfound|unreachable|"
    r"temporary failure|name resolution",
    re.IGNORECASE,
)


def _looks_like_model_id(text: str) -> bool:
    """Bare kebab/snake tokens such as ``gpt-4o-mini`` are model ids, not errors."""
    if "-" not in text and "_" not in text:
        return False
    if not _MODEL_ID.match(text):
        return False
    return all(token for token in re.split(r"[_-]", text))


def is_transient_failure(text: str | None) -> bool:
    """True if retrying later or elsewhere may succeed (rate limit, quota, billing)."""
    if not text or not text.strip():
        return False
    s = text.strip()
    if _looks_like_model_id(s.lower()):
        return False
    return any(p.search(s) for p in _TRANSIENT_PATTERNS)


def is_context_limit_failure(text: str | None) -> bool:
    """True if the input was too large for the model's context window."""
    if not text:
        return False
    s = text.lower()
    if "maximum context length" in s or "context length is" in s:
        return True
    if "requested about" in s and "tokens" in s:
        return True
    if "middle-out" in s:
        return True
    if "context window" in s or "token limit" in s:
        return True
    return "tokens" in s and ("too" in s or "exceed" in s)


def classify(text: str | None) -> FailureKind | None:
    """Classify provider text; None means it is not a recognised failure.

    Context-limit phrasing is checked first since some providers mention
    quotas in the same message.
    """
    if is_context_limit_failure(text):
        return FailureKind.CONTEXT_LIMIT
    if is_transient_failure(text):
        return FailureKind.TRANSIENT
    return None


def mentions_billing(text: str | None) -> bool:
    """Provider-wide exhaustion: switching models of the same provider won't help."""
    return bool(text) and bool(_BILLING.search(text or ""))


def looks_like_network_failure(text: str | None) -> bool:
    return bool(text) and bool(_NETWORK.search(text or ""))
