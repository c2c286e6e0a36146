"""Provider credential loading.

Credentials live in project-local TOML files under ``.geeto/``:

    .geeto/gemini.toml       gemini_api_key = "..."
    .geeto/openrouter.toml   openrouter_api_key = "..."
    .geeto/copilot.toml      github_token = "..."

Each file also accepts the generic ``api_key`` / ``apiKey`` names. The
environment variables ``GEMINI_API_KEY``, ``OPENROUTER_API_KEY`` and
``GITHUB_TOKEN`` take precedence over the files.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import GeetoError
from .result import Err, Ok, Result
from .structured import StrDict, get_str

__all__ = [
    "GEETO_DIR",
    "ProviderConfig",
    "credential_path",
    "load_provider_config",
]

GEETO_DIR = ".geeto"

_FILES = {
    "gemini": ("gemini.toml", "gemini_api_key", "GEMINI_API_KEY"),
    "openrouter": ("openrouter.toml", "openrouter_api_key", "OPENROUTER_API_KEY"),
    "copilot": ("copilot.toml", "github_token", "GITHUB_TOKEN"),
}


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """API credentials per provider. None means not configured."""

    gemini_api_key: str | None = None
    openrouter_api_key: str | None = None
    github_token: str | None = None

    def key_for(self, provider: str) -> str | None:
        match provider:
            case "gemini":
                return self.gemini_api_key
            case "openrouter":
                return self.openrouter_api_key
            case "copilot":
                return self.github_token
            case _:
                return None


def credential_path(root: Path, provider: str) -> Path:
    filename = _FILES[provider][0]
    return root / GEETO_DIR / filename


def _read_toml(path: Path) -> Result[StrDict | None, GeetoError]:
    if not path.exists():
        return Ok(None)
    try:
        with path.open("rb") as f:
            return Ok(tomllib.load(f))
    except tomllib.TOMLDecodeError as e:
        return Err(GeetoError(kind="io_failed", message=f"invalid TOML in {path}: {e}"))
    except OSError as e:
        return Err(GeetoError(kind="io_failed", message=f"cannot read {path}: {e}"))


def _pick_key(data: StrDict, primary: str) -> str | None:
    for name in (primary, "api_key", "apiKey"):
        value = get_str(data, name)
        if value is not None:
            return value
    return None


def load_provider_config(
    root: Path, env: Mapping[str, str] | None = None
) -> Result[ProviderConfig, GeetoError]:
    """Load credentials for all providers.

    Args:
        root: Project root containing ``.geeto/``
        env: Environment mapping (defaults to os.environ)

    Returns:
        Ok(ProviderConfig), or Err(GeetoError) if a file exists but is unreadable
    """
    environ = os.environ if env is None else env
    keys: dict[str, str | None] = {}

    for provider, (_, primary, env_var) in _FILES.items():
        from_env = environ.get(env_var, "").strip()
        if from_env:
            keys[provider] = from_env
            continue

        loaded = _read_toml(credential_path(root, provider))
        if isinstance(loaded, Err):
            return loaded
        keys[provider] = _pick_key(loaded.value, primary) if loaded.value is not None else None

    return Ok(
        ProviderConfig(
            gemini_api_key=keys["gemini"],
            openrouter_api_key=keys["openrouter"],
            github_token=keys["copilot"],
        )
    )
