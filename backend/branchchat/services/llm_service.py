"""
LLM provider adapters and the static provider registry.

Two wire formats are supported: the OpenAI-compatible chat completion API
(shared by several vendors) and Google's generateContent API. Every adapter
exposes the same ``complete`` call and raises UpstreamError on any failure.
"""

from openai import AsyncOpenAI
import openai
import aiohttp
import asyncio
import logging
from typing import Any, Dict, List, Optional

from ..config import settings
from ..exceptions import UpstreamError, UnsupportedProvider


logger = logging.getLogger(__name__)


# provider id -> static configuration
PROVIDERS: Dict[str, Dict[str, Any]] = {
    "openai": {
        "base_url": "https://api.openai.com/v1",
        "models": ["gpt-4o-mini", "gpt-3.5-turbo"],
        "api_format": "openai",
    },
    "google": {
        "base_url": "https://generativelanguage.googleapis.com/v1beta",
        "models": ["gemini-2.0-flash", "gemini-1.5-flash"],
        "api_format": "google",
    },
    "groq": {
        "base_url": "https://api.groq.com/openai/v1",
        "models": ["llama-3.1-8b-instant", "mixtral-8x7b-32768", "gemma2-9b-it"],
        "api_format": "openai",
    },
    "deepseek": {
        "base_url": "https://api.deepseek.com/v1",
        "models": ["deepseek-chat"],
        "api_format": "openai",
    },
}


class ProviderAdapter:
    """Uniform completion call over one upstream wire format."""

    def __init__(
        self,
        provider: str,
        base_url: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None
    ):
        self.provider = provider
        self.base_url = base_url.rstrip("/")
        self.temperature = settings.LLM_TEMPERATURE if temperature is None else temperature
        self.max_tokens = settings.LLM_MAX_TOKENS if max_tokens is None else max_tokens
        self.timeout = settings.LLM_TIMEOUT_SECONDS if timeout is None else timeout

    async def complete(self, api_key: str, model: str, messages: List[Dict[str, str]]) -> str:
        """
        Send the ordered conversation and return the reply text.

        Args:
            api_key: The user's secret for this provider
            model: Upstream model identifier
            messages: ``{"role": "user"|"assistant", "content": str}`` dicts, oldest first
        """
        raise NotImplementedError


class OpenAICompatibleAdapter(ProviderAdapter):
    """Chat completions over the OpenAI schema (OpenAI, Groq, DeepSeek)."""

    def _build_payload(self, model: str, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        return {
            "model": model,
            "messages": [{"role": m["role"], "content": m["content"]} for m in messages],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    async def complete(self, api_key: str, model: str, messages: List[Dict[str, str]]) -> str:
        payload = self._build_payload(model, messages)

        try:
            async with AsyncOpenAI(
                base_url=self.base_url,
                api_key=api_key,
                timeout=self.timeout,
                max_retries=0
            ) as client:
                response = await client.chat.completions.create(**payload)
        except openai.APIStatusError as e:
            raise UpstreamError(self.provider, e.status_code, e.response.text) from e
        except openai.APITimeoutError as e:
            raise UpstreamError(self.provider, None, "Request timed out") from e
        except openai.APIConnectionError as e:
            raise UpstreamError(self.provider, None, f"Connection error: {e}") from e
        except (openai.APIError, ValueError) as e:
            raise UpstreamError(self.provider, None, f"Malformed response: {e}") from e

        # Unparseable 2xx bodies come back as plain strings, not ChatCompletion
        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise UpstreamError(self.provider, None, "Malformed response: no message content") from e

        if content is None:
            raise UpstreamError(self.provider, None, "Malformed response: no message content")

        return content


class GoogleAdapter(ProviderAdapter):
    """Google generative-content API; the key travels as a query parameter."""

    # Logical role -> wire role
    ROLE_MAP = {"assistant": "model", "user": "user"}

    def _build_payload(self, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        return {
            "contents": [
                {
                    "role": self.ROLE_MAP.get(m["role"], "user"),
                    "parts": [{"text": m["content"]}],
                }
                for m in messages
            ],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_tokens,
            },
        }

    async def complete(self, api_key: str, model: str, messages: List[Dict[str, str]]) -> str:
        url = f"{self.base_url}/models/{model}:generateContent"
        payload = self._build_payload(messages)

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    url,
                    params={"key": api_key},
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if not 200 <= response.status < 300:
                        body = await response.text()
                        raise UpstreamError(self.provider, response.status, body)
                    data = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise UpstreamError(self.provider, None, "Request timed out") from e
        except aiohttp.ClientError as e:
            # Not str(e): aiohttp errors may echo the URL, which carries the key
            raise UpstreamError(self.provider, None, f"Connection error: {type(e).__name__}") from e
        except ValueError as e:
            raise UpstreamError(self.provider, None, f"Malformed response: {e}") from e

        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamError(self.provider, None, "Malformed response: no candidate text") from e


ADAPTERS = {
    "openai": OpenAICompatibleAdapter,
    "google": GoogleAdapter,
}


def list_providers() -> List[Dict[str, Any]]:
    """Registry listing for display."""
    return [
        {"provider": name, "models": list(config["models"])}
        for name, config in PROVIDERS.items()
    ]


def get_adapter(provider: str, **options: Any) -> ProviderAdapter:
    """
    Build the adapter for a provider id.

    Base URLs come from the registry unless PROVIDER_BASE_URLS overrides them.
    Extra keyword options (temperature, max_tokens, timeout) are passed through.
    """
    config = PROVIDERS.get(provider)
    if config is None:
        raise UnsupportedProvider(provider)

    base_url = settings.PROVIDER_BASE_URLS.get(provider, config["base_url"])
    adapter_class = ADAPTERS[config["api_format"]]
    return adapter_class(provider, base_url, **options)
