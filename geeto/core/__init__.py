"""Core types shared by every layer."""

from .config import ProviderConfig, load_provider_config
from .errors import ErrorCode, GeetoError, cancelled, exit_code_for
from .prompter import Choice, Prompter, ScriptedPrompter
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "ProviderConfig",
    "load_provider_config",
    # errors
    "ErrorCode",
    "GeetoError",
    "cancelled",
    "exit_code_for",
    # prompter
    "Choice",
    "Prompter",
    "ScriptedPrompter",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
