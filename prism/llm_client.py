"""Async completion client for the AI augmentation stage.

Speaks two wire protocols over ``httpx``:

* Ollama ``/api/generate`` (local, no API key), and
* OpenAI-compatible ``/chat/completions``.

Every call opens a fresh ``AsyncClient`` so one instance can be shared by
concurrent analyses. Failures never raise: they come back as a
``CompletionResult`` with ``success=False``.

Typical usage::

    client = LlmClient.from_config(config.llm)
    resp = await client.complete("Summarise this requirement", config.llm)
    print(resp.text)
"""

from __future__ import annotations

import logging
import time

import httpx

from prism.analysis.augment import CompletionResult
from prism.config import LlmConfig

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = "You are a meticulous requirements analyst. Reply with JSON only."


class LlmClient:
    """Completion capability backed by an Ollama or OpenAI-compatible server."""

    def __init__(self, config: LlmConfig) -> None:
        self.config = config

    @classmethod
    def from_config(cls, config: LlmConfig) -> "LlmClient":
        return cls(config)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self, config: LlmConfig) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` configured with base URL and timeout."""
        headers = {}
        if config.api_key:
            headers["Authorization"] = f"Bearer {config.api_key}"
        return httpx.AsyncClient(
            base_url=config.resolved_base_url,
            headers=headers,
            timeout=httpx.Timeout(config.timeout, connect=10.0),
        )

    @staticmethod
    def _ollama_payload(prompt: str, config: LlmConfig) -> dict:
        return {
            "model": config.model,
            "prompt": prompt,
            "system": _SYSTEM_PROMPT,
            "stream": False,
            "format": "json",
            "options": {"temperature": 0},
        }

    @staticmethod
    def _openai_payload(prompt: str, config: LlmConfig) -> dict:
        return {
            "model": config.model,
            "messages": [
                {"role": "system", "content": _SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0,
        }

    @staticmethod
    def _extract_text(provider: str, data: dict) -> str:
        """Pull the generated text out of a provider response.

        Ollama puts the full text in ``"response"``; OpenAI-compatible
        servers in ``choices[0].message.content``.
        """
        if provider == "ollama":
            return data.get("response", "")
        choices = data.get("choices") or []
        if not choices:
            return ""
        return (choices[0].get("message") or {}).get("content") or ""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def complete(self, prompt: str, config: LlmConfig | None = None) -> CompletionResult:
        """Send *prompt* to the configured provider.

        Args:
            prompt: The full prompt text.
            config: Per-call override of the client's configuration.

        Returns:
            A ``CompletionResult`` with the generated text or an error.
        """
        config = config or self.config
        if not config.is_configured:
            return CompletionResult(
                model=config.model,
                success=False,
                error=f"AI provider '{config.provider}' is not configured",
            )

        if config.provider == "ollama":
            path, payload = "/api/generate", self._ollama_payload(prompt, config)
        else:
            path, payload = "/chat/completions", self._openai_payload(prompt, config)

        started = time.monotonic()
        try:
            async with self._client(config) as client:
                response = await client.post(path, json=payload)
                response.raise_for_status()
                data = response.json()
                return CompletionResult(
                    text=self._extract_text(config.provider, data),
                    model=data.get("model", config.model),
                    duration_ms=(time.monotonic() - started) * 1000.0,
                    success=True,
                )
        except httpx.ConnectError:
            return CompletionResult(
                model=config.model,
                success=False,
                error=f"Cannot connect to {config.provider} at {config.resolved_base_url}.",
            )
        except httpx.TimeoutException:
            return CompletionResult(
                model=config.model,
                success=False,
                error=f"Request to {config.provider} timed out after {config.timeout}s.",
            )
        except httpx.HTTPStatusError as exc:
            return CompletionResult(
                model=config.model,
                success=False,
                error=f"{config.provider} returned HTTP {exc.response.status_code}: {exc.response.text[:500]}",
            )
        except Exception as exc:  # noqa: BLE001
            logger.debug("Unexpected completion failure", exc_info=True)
            return CompletionResult(
                model=config.model,
                success=False,
                error=f"Unexpected error during completion: {exc}",
            )

    async def is_available(self) -> bool:
        """Return ``True`` if the provider answers a lightweight request."""
        config = self.config
        if config.provider == "none":
            return False
        path = "/api/tags" if config.provider == "ollama" else "/models"
        try:
            async with self._client(config) as client:
                response = await client.get(path)
                return response.status_code == 200
        except (httpx.ConnectError, httpx.TimeoutException):
            return False
        except Exception:  # noqa: BLE001
            return False
