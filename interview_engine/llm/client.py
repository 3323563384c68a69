"""
LLM client abstraction for multiple LLM providers.

Provides async interface for LLM calls with:
- Structured logging of requests/responses
- Timeout handling with one retry on timeout or rate limit
- Usage tracking (tokens)
- Two client roles: generation (questions) and evaluation (scoring, reports)

Supported providers:
- anthropic: Claude models (Messages API)
- openai: GPT models (Chat Completions API)
- groq: Llama models on Groq (OpenAI-compatible)
"""

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional

import httpx
import structlog

from interview_engine.core.config import Settings, settings
from interview_engine.core.exceptions import (
    ConfigurationError,
    LLMRateLimitError,
    LLMTimeoutError,
)

log = structlog.get_logger(__name__)


LLMClientType = Literal["generation", "evaluation"]

MAX_RETRIES = 1  # 2 total attempts
BASE_DELAY = 1.0  # seconds


# =============================================================================
# Defaults
# =============================================================================

PROVIDER_MODELS: Dict[str, str] = {
    "anthropic": "claude-sonnet-4-6",
    "openai": "gpt-4o",
    "groq": "llama-3.3-70b-versatile",
}

CLIENT_TYPE_DEFAULTS: Dict[LLMClientType, Dict[str, Any]] = {
    # Higher temperature so retries vary their output
    "generation": dict(temperature=0.7, max_tokens=1024),
    "evaluation": dict(temperature=0.3, max_tokens=2048),
}


# =============================================================================
# Response and Base Classes
# =============================================================================


@dataclass
class LLMResponse:
    """Standardized LLM response."""

    content: str
    model: str
    usage: Dict[str, int] = field(default_factory=dict)
    latency_ms: float = 0.0
    raw_response: Optional[Dict[str, Any]] = None


class LLMClient(ABC):
    """Abstract base for LLM providers.

    Subclasses build the provider payload and parse its response; the retry
    loop around the HTTP call is shared.
    """

    provider_name: str = "unknown"

    def __init__(
        self,
        model: str,
        temperature: float,
        max_tokens: int,
        timeout: float,
        client_type: LLMClientType,
        api_key: str,
        base_url: str,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.client_type = client_type
        self.api_key = api_key
        self.base_url = base_url

        log.info(
            "llm_client_initialized",
            provider=self.provider_name,
            client_type=self.client_type,
            model=self.model,
            timeout=self.timeout,
        )

    @abstractmethod
    def _endpoint(self) -> str:
        ...

    @abstractmethod
    def _headers(self) -> Dict[str, str]:
        ...

    @abstractmethod
    def _payload(
        self,
        prompt: str,
        system: Optional[str],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> Dict[str, Any]:
        ...

    @abstractmethod
    def _parse(self, data: Dict[str, Any]) -> LLMResponse:
        ...

    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """
        Generate a completion with automatic retry on timeout/rate-limit.

        Args:
            prompt: User message
            system: Optional system prompt
            temperature: Sampling temperature (defaults to init value)
            max_tokens: Max tokens (defaults to init value)
            timeout: Optional timeout override in seconds
            json_mode: Ask the provider for a JSON object where supported

        Returns:
            LLMResponse with content and usage stats

        Raises:
            LLMTimeoutError: After all retries exhausted on timeout
            LLMRateLimitError: After all retries exhausted on rate limit (429)
            httpx.HTTPStatusError: On other API errors (no retry)
        """
        temperature = self.temperature if temperature is None else temperature
        max_tokens = self.max_tokens if max_tokens is None else max_tokens
        timeout = self.timeout if timeout is None else timeout

        payload = self._payload(prompt, system, temperature, max_tokens, json_mode)

        for attempt in range(MAX_RETRIES + 1):
            start = time.perf_counter()

            log.debug(
                "llm_call_start",
                provider=self.provider_name,
                client_type=self.client_type,
                model=self.model,
                prompt_length=len(prompt),
                system_length=len(system) if system else 0,
                attempt=attempt + 1,
            )

            try:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.post(
                        self._endpoint(), headers=self._headers(), json=payload
                    )
                    response.raise_for_status()
                    data = response.json()

                result = self._parse(data)
                result.latency_ms = (time.perf_counter() - start) * 1000

                log.info(
                    "llm_call_complete",
                    provider=self.provider_name,
                    client_type=self.client_type,
                    model=result.model,
                    latency_ms=round(result.latency_ms, 2),
                    input_tokens=result.usage.get("input_tokens", 0),
                    output_tokens=result.usage.get("output_tokens", 0),
                    attempt=attempt + 1,
                )
                return result

            except httpx.TimeoutException as e:
                log.warning(
                    "llm_timeout",
                    provider=self.provider_name,
                    attempt=attempt + 1,
                    timeout_seconds=timeout,
                )
                if attempt >= MAX_RETRIES:
                    raise LLMTimeoutError(
                        f"LLM call timed out after {MAX_RETRIES + 1} attempts "
                        f"(timeout={timeout}s)"
                    ) from e

            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code
                if status_code != 429:
                    log.error(
                        "llm_http_error",
                        provider=self.provider_name,
                        status_code=status_code,
                    )
                    raise
                log.warning(
                    "llm_rate_limit", provider=self.provider_name, attempt=attempt + 1
                )
                if attempt >= MAX_RETRIES:
                    raise LLMRateLimitError(
                        f"Rate limit exceeded after {MAX_RETRIES + 1} attempts"
                    ) from e

            delay = BASE_DELAY * (2**attempt)
            log.info("llm_retry", delay_seconds=delay, next_attempt=attempt + 2)
            await asyncio.sleep(delay)

        raise AssertionError("unreachable")


# =============================================================================
# Anthropic Client
# =============================================================================


class AnthropicClient(LLMClient):
    """Anthropic Claude API client (Messages API)."""

    provider_name = "anthropic"

    def _endpoint(self) -> str:
        return f"{self.base_url}/messages"

    def _headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "content-type": "application/json",
            "anthropic-version": "2023-06-01",
        }

    def _payload(self, prompt, system, temperature, max_tokens, json_mode):
        # Messages API has no JSON mode; prompts already demand strict JSON
        payload: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }
        if system:
            payload["system"] = system
        return payload

    def _parse(self, data: Dict[str, Any]) -> LLMResponse:
        content = ""
        if data.get("content"):
            content = data["content"][0].get("text", "")
        usage = data.get("usage", {})
        return LLMResponse(
            content=content,
            model=data.get("model", self.model),
            usage={
                "input_tokens": usage.get("input_tokens", 0),
                "output_tokens": usage.get("output_tokens", 0),
            },
            raw_response=data,
        )


# =============================================================================
# OpenAI-Compatible Clients
# =============================================================================


class OpenAICompatibleClient(LLMClient):
    """
    Client for APIs following the OpenAI Chat Completions format.

    - OpenAI: https://api.openai.com/v1
    - Groq: https://api.groq.com/openai/v1
    """

    def _endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _payload(self, prompt, system, temperature, max_tokens, json_mode):
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}
        return payload

    def _parse(self, data: Dict[str, Any]) -> LLMResponse:
        content = ""
        if data.get("choices"):
            content = data["choices"][0].get("message", {}).get("content") or ""
        usage = data.get("usage", {})
        return LLMResponse(
            content=content,
            model=data.get("model", self.model),
            usage={
                "input_tokens": usage.get("prompt_tokens", 0),
                "output_tokens": usage.get("completion_tokens", 0),
            },
            raw_response=data,
        )


class OpenAIClient(OpenAICompatibleClient):
    provider_name = "openai"


class GroqClient(OpenAICompatibleClient):
    provider_name = "groq"


# =============================================================================
# Client Factory
# =============================================================================

_PROVIDERS = {
    "anthropic": (AnthropicClient, "https://api.anthropic.com/v1", "anthropic_api_key"),
    "openai": (OpenAIClient, "https://api.openai.com/v1", "openai_api_key"),
    "groq": (GroqClient, "https://api.groq.com/openai/v1", "groq_api_key"),
}


def get_llm_client(
    client_type: LLMClientType,
    config: Optional[Settings] = None,
) -> LLMClient:
    """
    Factory for an LLM client of the configured provider.

    Args:
        client_type: "generation" or "evaluation"
        config: Settings to read provider, model and keys from (defaults to env)

    Returns:
        LLMClient configured for the client type

    Raises:
        ConfigurationError: Unknown provider or missing API key
    """
    config = config or settings
    provider = config.llm_provider

    if provider not in _PROVIDERS:
        raise ConfigurationError(
            f"Unknown LLM provider '{provider}'. "
            f"Supported providers: {', '.join(_PROVIDERS)}"
        )

    client_cls, base_url, key_field = _PROVIDERS[provider]
    api_key = getattr(config, key_field)
    if not api_key:
        raise ConfigurationError(
            f"{key_field.upper()} not configured. Set it in .env."
        )

    defaults = CLIENT_TYPE_DEFAULTS[client_type]
    return client_cls(
        model=config.llm_model or PROVIDER_MODELS[provider],
        temperature=defaults["temperature"],
        max_tokens=defaults["max_tokens"],
        timeout=config.llm_timeout,
        client_type=client_type,
        api_key=api_key,
        base_url=base_url,
    )
