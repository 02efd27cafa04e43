"""
Tests for environment-driven settings.
"""
import pytest

from paper_digest.config import DEFAULT_BASE_URL, DEFAULT_CHUNK_LIMIT, load_settings
from paper_digest.exceptions import ConfigurationError

ENV_VARS = [
    "ARTICLES_BASE_URL", "CHUNK_LIMIT", "LLM_PROVIDER", "LLM_MODEL", "OPENAI_API_KEY",
    "OPENROUTER_API_KEY", "GOOGLE_API_KEY", "OLLAMA_BASE_URL", "OLLAMA_HOST",
    "REQUEST_TIMEOUT", "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        # setenv first so teardown also removes values loaded from .env files
        monkeypatch.setenv(name, "unset")
        monkeypatch.delenv(name)
    empty_env = tmp_path / ".env"
    empty_env.write_text("")
    return str(empty_env)


def test_defaults(clean_env):
    settings = load_settings(clean_env)

    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.chunk_limit == DEFAULT_CHUNK_LIMIT == 12000
    assert settings.provider == "openai"
    assert settings.openai_api_key is None


def test_values_from_environment(clean_env, monkeypatch):
    monkeypatch.setenv("ARTICLES_BASE_URL", "https://example.org/articles")
    monkeypatch.setenv("CHUNK_LIMIT", "5000")
    monkeypatch.setenv("LLM_PROVIDER", "Ollama")
    monkeypatch.setenv("OLLAMA_HOST", "http://gpu-box:11434")
    monkeypatch.setenv("REQUEST_TIMEOUT", "12.5")

    settings = load_settings(clean_env)

    assert settings.base_url == "https://example.org/articles/"
    assert settings.chunk_limit == 5000
    assert settings.provider == "ollama"
    assert settings.ollama_base_url == "http://gpu-box:11434"
    assert settings.request_timeout == 12.5


def test_env_file_is_loaded(clean_env, monkeypatch, tmp_path):
    env_file = tmp_path / "custom.env"
    env_file.write_text("CHUNK_LIMIT=800\nOPENAI_API_KEY=sk-file\n")

    settings = load_settings(str(env_file))

    assert settings.chunk_limit == 800
    assert settings.openai_api_key == "sk-file"


@pytest.mark.parametrize("value", ["0", "-10", "lots"])
def test_invalid_chunk_limit(clean_env, monkeypatch, value):
    monkeypatch.setenv("CHUNK_LIMIT", value)
    with pytest.raises(ConfigurationError):
        load_settings(clean_env)


def test_unknown_provider(clean_env, monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "mystery")
    with pytest.raises(ConfigurationError):
        load_settings(clean_env)
