from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

from resume_enricher.ai.config import AIConfig, load_ai_config
from resume_enricher.ai.errors import EnvelopeMalformed, ProviderNotConfigured
from resume_enricher.ai.retry import execute
from resume_enricher.ai.throttle import TokenBucket, get_shared_bucket

logger = logging.getLogger(__name__)


def build_request_body(prompt: str) -> dict[str, Any]:
    return {"contents": [{"parts": [{"text": prompt}]}]}


def extract_text(payload: Any) -> str:
    """Pull ``candidates[0].content.parts[0].text`` out of a response body."""
    if isinstance(payload, dict) and payload.get("error"):
        error = payload["error"]
        message = error.get("message") if isinstance(error, dict) else str(error)
        raise EnvelopeMalformed(f"Error from Gemini API: {message}")
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise EnvelopeMalformed("Failed to extract text from Gemini API response.") from exc
    if not isinstance(text, str):
        raise EnvelopeMalformed("Gemini API response text is not a string.")
    return text


class GeminiProvider:
    def __init__(
        self,
        config: AIConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        bucket: TokenBucket | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._config = config or load_ai_config()
        self._client = client or httpx.AsyncClient(timeout=self._config.timeout_s)
        self._bucket = bucket
        self._sleep = sleep

    @property
    def model(self) -> str:
        return self._config.model

    @property
    def endpoint(self) -> str:
        return f"{self._config.base_url}/models/{self._config.model}:generateContent"

    async def _post(self, body: dict[str, Any]) -> httpx.Response:
        response = await self._client.post(
            self.endpoint,
            params={"key": self._config.api_key},
            json=body,
            headers={"Content-Type": "application/json"},
        )
        response.raise_for_status()
        return response

    async def generate(self, prompt: str) -> str:
        if not self._config.api_key:
            raise ProviderNotConfigured("GEMINI_API_KEY is missing")

        body = build_request_body(prompt)
        response = await execute(
            lambda: self._post(body),
            bucket=self._bucket or get_shared_bucket(),
            max_attempts=self._config.max_attempts,
            base_delay_s=self._config.backoff_base_s,
            sleep=self._sleep,
        )
        try:
            payload = response.json()
        except ValueError as exc:
            raise EnvelopeMalformed(
                "Gemini API response is not JSON.",
                status_code=response.status_code,
            ) from exc

        text = extract_text(payload)
        logger.debug("gemini_response model=%s text_len=%s", self.model, len(text))
        return text

    async def aclose(self) -> None:
        await self._client.aclose()
