"""AI text-completion providers — one class per vendor REST API.

Every provider implements the same contract:

    await provider.complete(system_prompt, user_prompt, temperature, max_tokens) -> str

and raises `ProviderError` for anything that is not a usable completion
(missing key, non-200, timeout, transport failure, empty text). The
orchestrator never branches on vendor names; it only sees `AIProvider`.

Rules
-----
- Plain REST over httpx, no vendor SDKs.
- Every call is bounded by the configured timeout.
- No retries here. Retry policy (provider fallback) belongs to the orchestrator.
"""

from __future__ import annotations

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from ..config import Settings
from .errors import AIOutputParseError, ProviderError

logger = logging.getLogger(__name__)

_OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"
_ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
_ANTHROPIC_VERSION = "2023-06-01"
_GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


# ---------------------------------------------------------------------------
# JSON extraction: best-effort recovery, not a guarantee
# ---------------------------------------------------------------------------
def sanitize_json(raw: str) -> str:
    """Cut model text down to its outermost JSON object span.

    Takes everything from the first '{' to the last '}' so prose and
    markdown fences around the object are dropped. Nothing inside the span
    is repaired: malformed JSON must fail parsing.

    Raises AIOutputParseError if there is no '{...}' span.
    """
    text = (raw or "").strip().lstrip("\ufeff")

    first = text.find("{")
    last = text.rfind("}")
    if first == -1 or last == -1 or last <= first:
        raise AIOutputParseError("Model did not return a JSON object")
    return text[first : last + 1]


def parse_json_object(raw: str) -> Dict[str, Any]:
    """sanitize_json + json.loads, requiring a top-level object."""
    span = sanitize_json(raw)
    try:
        parsed = json.loads(span)
    except json.JSONDecodeError as exc:
        raise AIOutputParseError(f"Invalid JSON from model: {exc}") from exc
    if not isinstance(parsed, dict):
        raise AIOutputParseError("Model JSON is not an object")
    return parsed


# ---------------------------------------------------------------------------
# Provider contract
# ---------------------------------------------------------------------------
class AIProvider(ABC):
    """One vendor + model, ready to complete prompts."""

    name: str = "base"

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout: float = 55.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = (api_key or "").strip()
        self.model = model
        self.timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r}, configured={self.is_configured})"

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> str:
        if not self.is_configured:
            logger.warning("[AI] %s API key missing", self.name)
            raise ProviderError(self.name, "API key not configured")

        url, headers, payload = self._build_request(system_prompt, user_prompt, temperature, max_tokens)

        t0 = time.perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, headers=headers, json=payload)
        except httpx.TimeoutException as exc:
            duration = time.perf_counter() - t0
            logger.warning("[AI] %s/%s timeout after %.1fs", self.name, self.model, duration)
            raise ProviderError(self.name, f"timeout after {duration:.1f}s") from exc
        except httpx.HTTPError as exc:
            logger.warning("[AI] %s/%s transport error: %s", self.name, self.model, exc)
            raise ProviderError(self.name, f"transport error: {exc}") from exc

        duration = time.perf_counter() - t0
        logger.info("[AI] %s/%s HTTP %d (%.1fs)", self.name, self.model, response.status_code, duration)

        if response.status_code != 200:
            logger.warning("[AI] %s error response: %s", self.name, response.text[:400])
            raise ProviderError(self.name, f"HTTP {response.status_code}", status_code=response.status_code)

        try:
            data = response.json()
            text = self._extract_text(data)
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ProviderError(self.name, f"unexpected response shape: {exc}") from exc

        text = (text or "").strip()
        if not text:
            raise ProviderError(self.name, "empty completion")

        logger.info("[AI] %s raw output length: %d chars", self.name, len(text))
        return text

    @abstractmethod
    def _build_request(
        self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int
    ) -> tuple[str, Dict[str, str], Dict[str, Any]]:
        """Return (url, headers, json payload)."""

    @abstractmethod
    def _extract_text(self, data: Dict[str, Any]) -> str:
        """Pull the completion text out of a decoded 200 response."""


# ---------------------------------------------------------------------------
# Concrete providers
# ---------------------------------------------------------------------------
class OpenAIProvider(AIProvider):
    name = "openai"

    def _build_request(self, system_prompt, user_prompt, temperature, max_tokens):
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
            "response_format": {"type": "json_object"},
        }
        return _OPENAI_API_URL, headers, payload

    def _extract_text(self, data):
        usage = data.get("usage")
        if usage:
            logger.info(
                "[AI] openai tokens used: prompt=%s, completion=%s",
                usage.get("prompt_tokens", "?"),
                usage.get("completion_tokens", "?"),
            )
        return data["choices"][0]["message"]["content"]


class AnthropicProvider(AIProvider):
    name = "anthropic"

    def _build_request(self, system_prompt, user_prompt, temperature, max_tokens):
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": _ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        return _ANTHROPIC_API_URL, headers, payload

    def _extract_text(self, data):
        return "".join(block.get("text", "") for block in data["content"] if block.get("type") == "text")


class GeminiProvider(AIProvider):
    name = "gemini"

    def _build_request(self, system_prompt, user_prompt, temperature, max_tokens):
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        payload = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }
        return _GEMINI_API_URL.format(model=self.model), headers, payload

    def _extract_text(self, data):
        parts = data["candidates"][0]["content"]["parts"]
        return "".join(part.get("text", "") for part in parts)


PROVIDER_CLASSES: Dict[str, type] = {
    OpenAIProvider.name: OpenAIProvider,
    AnthropicProvider.name: AnthropicProvider,
    GeminiProvider.name: GeminiProvider,
}


def build_provider(
    name: str,
    model: str,
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AIProvider:
    """Construct the provider for `name`. Unknown names raise ValueError."""
    try:
        provider_cls = PROVIDER_CLASSES[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown AI provider: {name!r}") from None
    return provider_cls(
        api_key=settings.api_key_for(name.lower()),
        model=model,
        timeout=settings.ai_request_timeout,
        transport=transport,
    )
