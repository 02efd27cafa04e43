import logging
import re

import httpx
from google import genai
from google.genai import types
from openai import AsyncOpenAI

from paper_digest.config import Settings
from paper_digest.exceptions import ConfigurationError
from paper_digest.prompts import NO_EVIDENCE
from paper_digest.utils import ensure_trace, timed_await

logger = logging.getLogger(__name__)

# Returned instead of raising when a model call fails for any reason.
MODEL_FAILURE = "ERROR"


def is_failure(text: str) -> bool:
    return text == MODEL_FAILURE


class ChatModel:
    """
    Base class for model providers.

    Subclasses implement `_complete(system, user)` and may raise anything;
    `invoke` turns every failure into MODEL_FAILURE so one failed chunk
    never aborts the rest of a pipeline.
    """
    provider_key = "base"
    default_model = ""

    def __init__(self, model_name: str | None = None):
        self.model_name = model_name or self.default_model
        self.traces: list[dict] = []

    async def _complete(self, system: str, user: str) -> str | None:
        raise NotImplementedError

    async def invoke(self, system: str, user: str) -> str:
        prompt = f"{system}\n{user}"
        try:
            content, latency_ms = await timed_await(self._complete, system, user)
        except Exception as e:
            logger.error("%s call failed (model=%s): %s", self.provider_key, self.model_name, e, exc_info=True)
            self.traces.append(ensure_trace(
                text="",
                prompt=prompt,
                provider=self.provider_key,
                model=self.model_name,
                ok=False,
            ))
            return MODEL_FAILURE

        text = (content or "").strip()
        self.traces.append(ensure_trace(
            text=text,
            prompt=prompt,
            provider=self.provider_key,
            model=self.model_name,
            latency_ms=latency_ms,
        ))
        logger.debug("%s call ok in %d ms (%d chars in, %d out)",
                     self.provider_key, latency_ms, len(prompt), len(text))
        return text


class DummyModel(ChatModel):
    """Offline extractive model for development: no API key, no network."""
    provider_key = "dummy-local"
    default_model = "dummy-echo"

    _WORD = re.compile(r"[a-z0-9]{4,}")
    _ARTICLE = re.compile(r"=== ARTICLE START ===\n(.*)\n=== ARTICLE END ===", re.DOTALL)

    def _extract(self, user: str) -> str:
        question = None
        m = re.match(r"Question: (.*)", user)
        if m:
            question = m.group(1)

        article = self._ARTICLE.search(user)
        body = article.group(1) if article else user
        lines = [line.strip() for line in body.splitlines() if line.strip()]

        if question is None:
            return " ".join(lines[:3])[:600]

        terms = set(self._WORD.findall(question.lower()))
        hits = [
            line for line in lines
            if not line.startswith("Question:") and terms & set(self._WORD.findall(line.lower()))
        ]
        if hits:
            return "\n".join(hits[:3])
        if NO_EVIDENCE in user:
            return NO_EVIDENCE
        return "The article does not answer the question."

    async def _complete(self, system: str, user: str) -> str:
        return self._extract(user)


class OpenAIChatModel(ChatModel):
    provider_key = "openai"
    default_model = "gpt-4.1-nano"

    def __init__(self, api_key: str, model_name: str | None = None, timeout: float = 60.0):
        super().__init__(model_name)
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY not set.")
        self._client = AsyncOpenAI(api_key=api_key, timeout=timeout)

    async def _complete(self, system: str, user: str) -> str | None:
        response = await self._client.chat.completions.create(
            model=self.model_name,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        )
        return response.choices[0].message.content


class OpenRouterModel(ChatModel):
    provider_key = "openrouter"
    default_model = "google/gemini-2.0-flash-001"

    def __init__(self, api_key: str, model_name: str | None = None, timeout: float = 60.0):
        super().__init__(model_name)
        if not api_key:
            raise ConfigurationError("OPENROUTER_API_KEY not set.")
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "X-Title": "Paper Digest",
        }
        self._timeout = timeout

    async def _complete(self, system: str, user: str) -> str | None:
        data = {
            "model": self.model_name,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        }
        async with httpx.AsyncClient(base_url="https://openrouter.ai/api/v1", timeout=self._timeout) as client:
            response = await client.post("/chat/completions", headers=self._headers, json=data)
            response.raise_for_status()
            return response.json()["choices"][0]["message"]["content"]


class GeminiChatModel(ChatModel):
    provider_key = "gemini-api"
    default_model = "gemini-2.0-flash"

    def __init__(self, api_key: str, model_name: str | None = None):
        super().__init__(model_name)
        if not api_key:
            raise ConfigurationError("GOOGLE_API_KEY not set.")
        self._client = genai.Client(api_key=api_key)

    async def _complete(self, system: str, user: str) -> str | None:
        response = await self._client.aio.models.generate_content(
            model=self.model_name,
            contents=user,
            config=types.GenerateContentConfig(system_instruction=system, temperature=0.2),
        )
        return response.text


class OllamaModel(ChatModel):
    provider_key = "ollama"
    default_model = "qwen2:0.5b"

    def __init__(self, base_url: str = "http://localhost:11434", model_name: str | None = None,
                 timeout: float = 120.0):
        super().__init__(model_name)
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def _complete(self, system: str, user: str) -> str | None:
        payload = {
            "model": self.model_name,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "stream": False,
        }
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(f"{self.base_url}/api/chat", json=payload)
            response.raise_for_status()
            data = response.json() or {}
            return (data.get("message") or {}).get("content")


def get_model(provider: str, model_name: str = None, settings: Settings = None) -> ChatModel:
    """Build a provider with credentials taken from `settings`."""
    settings = settings or Settings()
    provider = (provider or "dummy-local").lower()
    if provider == "openai":
        return OpenAIChatModel(settings.openai_api_key, model_name, timeout=settings.request_timeout)
    if provider == "openrouter":
        return OpenRouterModel(settings.openrouter_api_key, model_name, timeout=settings.request_timeout)
    if provider == "gemini-api":
        return GeminiChatModel(settings.google_api_key, model_name)
    if provider == "ollama":
        return OllamaModel(settings.ollama_base_url, model_name, timeout=settings.request_timeout)
    return DummyModel(model_name)
