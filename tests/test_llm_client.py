"""Unit tests for LlmClient (prism.llm_client).

Tests cover:
- Payload builders and response text extraction
- LlmClient.complete for Ollama and OpenAI-compatible providers
- Error mapping (not configured, connect error, timeout, HTTP error, unexpected error)
- LlmClient.is_available
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import httpx
import pytest

from prism.config import LlmConfig
from prism.llm_client import LlmClient

OLLAMA = LlmConfig(provider="ollama", model="llama3.1:latest")
OPENAI = LlmConfig(provider="openai", model="gpt-4o-mini", api_key="sk-test")


# ---------------------------------------------------------------------------
# Static helpers
# ---------------------------------------------------------------------------


class TestStaticHelpers:
    @pytest.mark.unit
    def test_ollama_payload(self):
        payload = LlmClient._ollama_payload("Analyse this", OLLAMA)
        assert payload["model"] == "llama3.1:latest"
        assert payload["prompt"] == "Analyse this"
        assert payload["format"] == "json"
        assert payload["stream"] is False

    @pytest.mark.unit
    def test_openai_payload(self):
        payload = LlmClient._openai_payload("Analyse this", OPENAI)
        assert payload["messages"][0]["role"] == "system"
        assert payload["messages"][1] == {"role": "user", "content": "Analyse this"}
        assert payload["temperature"] == 0

    @pytest.mark.unit
    def test_extract_text_ollama(self):
        assert LlmClient._extract_text("ollama", {"response": "{}"}) == "{}"
        assert LlmClient._extract_text("ollama", {}) == ""

    @pytest.mark.unit
    def test_extract_text_openai(self):
        data = {"choices": [{"message": {"content": "{\"gaps\": []}"}}]}
        assert LlmClient._extract_text("openai", data) == "{\"gaps\": []}"
        assert LlmClient._extract_text("openai", {"choices": []}) == ""
        assert LlmClient._extract_text("openai", {"choices": [{"message": None}]}) == ""


# ---------------------------------------------------------------------------
# LlmClient.complete
# ---------------------------------------------------------------------------


class TestComplete:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_ollama_success(self, async_client_factory, json_response_factory):
        response = json_response_factory({"response": "{\"ambiguities\": []}", "model": "llama3.1:latest"})
        mock_client = async_client_factory(response)

        with patch("httpx.AsyncClient", return_value=mock_client) as client_cls:
            result = await LlmClient(OLLAMA).complete("prompt")

        assert result.success is True
        assert result.text == "{\"ambiguities\": []}"
        assert result.model == "llama3.1:latest"
        path = mock_client.post.call_args.args[0]
        assert path == "/api/generate"
        assert mock_client.post.call_args.kwargs["json"]["format"] == "json"
        assert client_cls.call_args.kwargs["base_url"] == "http://localhost:11434"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_openai_success(self, async_client_factory, json_response_factory):
        response = json_response_factory({"choices": [{"message": {"content": "{}"}}]})
        mock_client = async_client_factory(response)

        with patch("httpx.AsyncClient", return_value=mock_client) as client_cls:
            result = await LlmClient(OPENAI).complete("prompt")

        assert result.success is True
        assert result.text == "{}"
        assert result.model == "gpt-4o-mini"
        assert mock_client.post.call_args.args[0] == "/chat/completions"
        assert client_cls.call_args.kwargs["headers"] == {"Authorization": "Bearer sk-test"}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_per_call_config_override(self, async_client_factory, json_response_factory):
        mock_client = async_client_factory(json_response_factory({"response": "ok"}))
        with patch("httpx.AsyncClient", return_value=mock_client):
            result = await LlmClient(LlmConfig()).complete("prompt", OLLAMA)
        assert result.success is True

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_not_configured(self):
        with patch("httpx.AsyncClient") as client_cls:
            result = await LlmClient(LlmConfig(provider="openai", model="gpt-4o-mini")).complete("prompt")
        assert result.success is False
        assert "not configured" in result.error
        client_cls.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_connect_error(self, async_client_factory):
        mock_client = async_client_factory(side_effect=httpx.ConnectError("Connection refused"))
        with patch("httpx.AsyncClient", return_value=mock_client):
            result = await LlmClient(OLLAMA).complete("prompt")
        assert result.success is False
        assert "Cannot connect" in result.error

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_timeout(self, async_client_factory):
        mock_client = async_client_factory(side_effect=httpx.ReadTimeout("timed out"))
        with patch("httpx.AsyncClient", return_value=mock_client):
            result = await LlmClient(OLLAMA).complete("prompt")
        assert result.success is False
        assert "timed out after 30s" in result.error

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_http_error(self, async_client_factory):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        error_response = httpx.Response(401, text="invalid api key", request=request)
        response = MagicMock()
        response.raise_for_status = MagicMock(side_effect=httpx.HTTPStatusError(
            "Unauthorized", request=request, response=error_response
        ))
        mock_client = async_client_factory(response)

        with patch("httpx.AsyncClient", return_value=mock_client):
            result = await LlmClient(OPENAI).complete("prompt")

        assert result.success is False
        assert "returned HTTP 401" in result.error
        assert "invalid api key" in result.error

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unexpected_error(self, async_client_factory, json_response_factory):
        response = json_response_factory({})
        response.json.side_effect = ValueError("not json")
        mock_client = async_client_factory(response)

        with patch("httpx.AsyncClient", return_value=mock_client):
            result = await LlmClient(OLLAMA).complete("prompt")

        assert result.success is False
        assert "not json" in result.error


# ---------------------------------------------------------------------------
# LlmClient.is_available
# ---------------------------------------------------------------------------


class TestIsAvailable:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_available(self, async_client_factory):
        response = MagicMock(status_code=200)
        mock_client = async_client_factory(response, method="get")
        with patch("httpx.AsyncClient", return_value=mock_client):
            assert await LlmClient(OLLAMA).is_available() is True
        assert mock_client.get.call_args.args[0] == "/api/tags"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_openai_models_endpoint(self, async_client_factory):
        mock_client = async_client_factory(MagicMock(status_code=200), method="get")
        with patch("httpx.AsyncClient", return_value=mock_client):
            assert await LlmClient(OPENAI).is_available() is True
        assert mock_client.get.call_args.args[0] == "/models"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unavailable(self, async_client_factory):
        mock_client = async_client_factory(side_effect=httpx.ConnectError("refused"), method="get")
        with patch("httpx.AsyncClient", return_value=mock_client):
            assert await LlmClient(OLLAMA).is_available() is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_provider_none(self):
        assert await LlmClient(LlmConfig()).is_available() is False
