"""Tests for geeto.core.config."""

from pathlib import Path

from geeto.core.config import credential_path, load_provider_config
from geeto.core.result import Err, Ok


def _write(root: Path, provider: str, content: str) -> None:
    path = credential_path(root, provider)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class TestLoadProviderConfig:
    def test_no_files_means_nothing_configured(self, tmp_path: Path) -> None:
        result = load_provider_config(tmp_path, env={})
        assert isinstance(result, Ok)
        config = result.value
        assert config.gemini_api_key is None
        assert config.openrouter_api_key is None
        assert config.github_token is None

    def test_reads_primary_keys(self, tmp_path: Path) -> None:
        _write(tmp_path, "gemini", 'gemini_api_key = "g-key"\n')
        _write(tmp_path, "openrouter", 'openrouter_api_key = "or-key"\n')
        _write(tmp_path, "copilot", 'github_token = "gh-token"\n')

        config = load_provider_config(tmp_path, env={}).unwrap()
        assert config.gemini_api_key == "g-key"
        assert config.openrouter_api_key == "or-key"
        assert config.github_token == "gh-token"

    def test_falls_back_to_generic_key_names(self, tmp_path: Path) -> None:
        _write(tmp_path, "gemini", 'api_key = "a"\n')
        _write(tmp_path, "openrouter", 'apiKey = "b"\n')

        config = load_provider_config(tmp_path, env={}).unwrap()
        assert config.gemini_api_key == "a"
        assert config.openrouter_api_key == "b"

    def test_environment_overrides_file(self, tmp_path: Path) -> None:
        _write(tmp_path, "gemini", 'gemini_api_key = "from-file"\n')

        config = load_provider_config(tmp_path, env={"GEMINI_API_KEY": "from-env"}).unwrap()
        assert config.gemini_api_key == "from-env"
        assert config.key_for("gemini") == "from-env"

    def test_broken_toml_is_io_error(self, tmp_path: Path) -> None:
        _write(tmp_path, "openrouter", "openrouter_api_key = \n")

        result = load_provider_config(tmp_path, env={})
        assert isinstance(result, Err)
        assert result.error.kind == "io_failed"
