"""AI orchestration: providers, failure classification and the decision loops."""

from geeto.ai.classify import FailureKind, classify, is_context_limit_failure, is_transient_failure
from geeto.ai.fallback import Failure, FallbackOutcome, fallback_actions, run_fallback
from geeto.ai.suggest import Suggestion, SuggestionContext, build_manual_commit, run_suggestion

__all__ = [
    "Failure",
    "FailureKind",
    "FallbackOutcome",
    "Suggestion",
    "SuggestionContext",
    "build_manual_commit",
    "classify",
    "fallback_actions",
    "is_context_limit_failure",
    "is_transient_failure",
    "run_fallback",
    "run_suggestion",
]
