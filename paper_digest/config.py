import os
from dataclasses import dataclass

from dotenv import load_dotenv

from paper_digest.exceptions import ConfigurationError

DEFAULT_BASE_URL = "https://raw.githubusercontent.com/AwesomeCoder412412/stupid/refs/heads/main/articles_text2/"
DEFAULT_CHUNK_LIMIT = 12000  # characters; tune if your model allows more

PROVIDERS = ("dummy-local", "openai", "openrouter", "gemini-api", "ollama")


@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    chunk_limit: int = DEFAULT_CHUNK_LIMIT
    provider: str = "openai"
    model_name: str | None = None
    openai_api_key: str | None = None
    openrouter_api_key: str | None = None
    google_api_key: str | None = None
    ollama_base_url: str = "http://localhost:11434"
    request_timeout: float = 60.0
    log_level: str = "INFO"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


def load_settings(env_file: str | None = None) -> Settings:
    """
    Build Settings from the process environment, after loading `.env`
    (or `env_file`) without overriding variables that are already set.
    """
    load_dotenv(env_file)

    base_url = os.getenv("ARTICLES_BASE_URL") or DEFAULT_BASE_URL
    if not base_url.endswith("/"):
        base_url += "/"

    chunk_limit = _int_env("CHUNK_LIMIT", DEFAULT_CHUNK_LIMIT)
    if chunk_limit <= 0:
        raise ConfigurationError(f"CHUNK_LIMIT must be positive, got {chunk_limit}")

    provider = (os.getenv("LLM_PROVIDER") or "openai").lower()
    if provider not in PROVIDERS:
        raise ConfigurationError(f"Unknown LLM_PROVIDER {provider!r}; expected one of {', '.join(PROVIDERS)}")

    return Settings(
        base_url=base_url,
        chunk_limit=chunk_limit,
        provider=provider,
        model_name=os.getenv("LLM_MODEL") or None,
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openrouter_api_key=os.getenv("OPENROUTER_API_KEY") or None,
        google_api_key=os.getenv("GOOGLE_API_KEY") or None,
        ollama_base_url=os.getenv("OLLAMA_BASE_URL") or os.getenv("OLLAMA_HOST") or "http://localhost:11434",
        request_timeout=_float_env("REQUEST_TIMEOUT", 60.0),
        log_level=os.getenv("LOG_LEVEL") or "INFO",
    )
