"""Tests for LLM client."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from interview_engine.core.config import Settings
from interview_engine.core.exceptions import (
    ConfigurationError,
    LLMRateLimitError,
    LLMTimeoutError,
)
from interview_engine.llm.client import (
    AnthropicClient,
    GroqClient,
    OpenAIClient,
    get_llm_client,
)


def _anthropic():
    return AnthropicClient(
        model="claude-sonnet-4-6",
        temperature=0.7,
        max_tokens=1024,
        timeout=30.0,
        client_type="generation",
        api_key="test-key",
        base_url="https://api.anthropic.com/v1",
    )


def _groq():
    return GroqClient(
        model="llama-3.3-70b-versatile",
        temperature=0.3,
        max_tokens=2048,
        timeout=30.0,
        client_type="evaluation",
        api_key="gsk-test",
        base_url="https://api.groq.com/openai/v1",
    )


def _http_response(data):
    response = MagicMock()
    response.json.return_value = data
    response.raise_for_status = MagicMock()
    return response


def _status_error(code):
    request = httpx.Request("POST", "https://example.test")
    response = httpx.Response(code, request=request)
    return httpx.HTTPStatusError("error", request=request, response=response)


class TestAnthropicClient:
    """Tests for AnthropicClient."""

    @pytest.mark.asyncio
    async def test_complete_success(self):
        """complete() returns LLMResponse on success."""
        mock_response = {
            "content": [{"type": "text", "text": "Hello, world!"}],
            "model": "claude-sonnet-4-6",
            "usage": {"input_tokens": 10, "output_tokens": 5},
        }

        with patch("httpx.AsyncClient") as MockClient:
            mock_client = AsyncMock()
            mock_client.post.return_value = _http_response(mock_response)
            MockClient.return_value.__aenter__.return_value = mock_client

            response = await _anthropic().complete("Say hello", system="Be brief")

        assert response.content == "Hello, world!"
        assert response.usage == {"input_tokens": 10, "output_tokens": 5}

        payload = mock_client.post.call_args.kwargs["json"]
        assert payload["system"] == "Be brief"
        assert payload["messages"] == [{"role": "user", "content": "Say hello"}]
        headers = mock_client.post.call_args.kwargs["headers"]
        assert headers["x-api-key"] == "test-key"

    @pytest.mark.asyncio
    async def test_timeout_retries_then_raises(self):
        """Timeouts are retried once, then surface as LLMTimeoutError."""
        with patch("httpx.AsyncClient") as MockClient, patch(
            "interview_engine.llm.client.asyncio.sleep", new=AsyncMock()
        ):
            mock_client = AsyncMock()
            mock_client.post.side_effect = httpx.TimeoutException("slow")
            MockClient.return_value.__aenter__.return_value = mock_client

            with pytest.raises(LLMTimeoutError):
                await _anthropic().complete("Hi")

        assert mock_client.post.await_count == 2

    @pytest.mark.asyncio
    async def test_rate_limit_then_success(self):
        ok = _http_response(
            {"content": [{"text": "ok"}], "usage": {"input_tokens": 1, "output_tokens": 1}}
        )
        with patch("httpx.AsyncClient") as MockClient, patch(
            "interview_engine.llm.client.asyncio.sleep", new=AsyncMock()
        ):
            mock_client = AsyncMock()
            mock_client.post.side_effect = [_status_error(429), ok]
            MockClient.return_value.__aenter__.return_value = mock_client

            response = await _anthropic().complete("Hi")

        assert response.content == "ok"

    @pytest.mark.asyncio
    async def test_rate_limit_exhausted(self):
        with patch("httpx.AsyncClient") as MockClient, patch(
            "interview_engine.llm.client.asyncio.sleep", new=AsyncMock()
        ):
            mock_client = AsyncMock()
            mock_client.post.side_effect = _status_error(429)
            MockClient.return_value.__aenter__.return_value = mock_client

            with pytest.raises(LLMRateLimitError):
                await _anthropic().complete("Hi")

    @pytest.mark.asyncio
    async def test_other_http_errors_not_retried(self):
        with patch("httpx.AsyncClient") as MockClient:
            mock_client = AsyncMock()
            mock_client.post.side_effect = _status_error(500)
            MockClient.return_value.__aenter__.return_value = mock_client

            with pytest.raises(httpx.HTTPStatusError):
                await _anthropic().complete("Hi")

        assert mock_client.post.await_count == 1


class TestOpenAICompatibleClient:
    """Tests for the Chat Completions clients."""

    @pytest.mark.asyncio
    async def test_json_mode_and_parse(self):
        mock_response = {
            "choices": [{"message": {"content": '{"a": 1}'}}],
            "model": "llama-3.3-70b-versatile",
            "usage": {"prompt_tokens": 12, "completion_tokens": 4},
        }
        with patch("httpx.AsyncClient") as MockClient:
            mock_client = AsyncMock()
            mock_client.post.return_value = _http_response(mock_response)
            MockClient.return_value.__aenter__.return_value = mock_client

            response = await _groq().complete("Give JSON", system="sys", json_mode=True)

        assert response.content == '{"a": 1}'
        assert response.usage == {"input_tokens": 12, "output_tokens": 4}

        args = mock_client.post.call_args
        assert args.args[0] == "https://api.groq.com/openai/v1/chat/completions"
        payload = args.kwargs["json"]
        assert payload["response_format"] == {"type": "json_object"}
        assert payload["messages"][0] == {"role": "system", "content": "sys"}
        assert args.kwargs["headers"]["Authorization"] == "Bearer gsk-test"


class TestGetLLMClient:
    """Tests for the client factory."""

    def test_anthropic_generation_defaults(self):
        config = Settings(_env_file=None, llm_provider="anthropic", anthropic_api_key="k")
        client = get_llm_client("generation", config)
        assert isinstance(client, AnthropicClient)
        assert client.temperature == 0.7
        assert client.max_tokens == 1024

    def test_evaluation_defaults_and_model_override(self):
        config = Settings(
            _env_file=None, llm_provider="openai", openai_api_key="k", llm_model="gpt-4o-mini"
        )
        client = get_llm_client("evaluation", config)
        assert isinstance(client, OpenAIClient)
        assert client.temperature == 0.3
        assert client.model == "gpt-4o-mini"

    def test_missing_key_raises(self):
        config = Settings(_env_file=None, llm_provider="groq", groq_api_key=None)
        with pytest.raises(ConfigurationError, match="GROQ_API_KEY"):
            get_llm_client("generation", config)
