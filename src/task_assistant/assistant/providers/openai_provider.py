"""OpenAI Responses API client returning structured results instead of raising."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from task_assistant.assistant.providers.base import ProviderFailureClass, ProviderResult
from task_assistant.assistant.providers.failure_classifier import classify_provider_failure
from task_assistant.config import ProviderSettings

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4.1-mini"
DEFAULT_TIMEOUT_SECONDS = 30.0
_ERROR_BODY_EXCERPT_CHARS = 300


class OpenAIProvider:
    """Single-shot client for ``POST /responses``. No retries."""

    name = "openai"

    def __init__(  # noqa: PLR0913
        self,
        *,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._model = model
        self._url = f"{base_url.rstrip('/')}/responses"
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout_seconds, connect=10.0),
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: ProviderSettings,
        transport: httpx.BaseTransport | None = None,
    ) -> OpenAIProvider:
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is not configured.")
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            timeout_seconds=settings.request_timeout_seconds,
            transport=transport,
        )

    def send(self, instruction_text: str) -> ProviderResult:
        try:
            response = self._client.post(
                self._url,
                json={"model": self._model, "input": instruction_text},
            )
        except httpx.TimeoutException:
            logger.warning("Timeout calling %s", self._url)
            return ProviderResult(
                is_success=False,
                text="",
                error="timeout",
                failure_class=ProviderFailureClass.TIMEOUT,
            )
        except httpx.HTTPError as exc:
            logger.warning("HTTP error calling %s: %s", self._url, exc)
            return ProviderResult(
                is_success=False,
                text="",
                error=str(exc),
                failure_class=ProviderFailureClass.NETWORK,
            )

        if not response.is_success:
            body = response.text
            classified = classify_provider_failure(status_code=response.status_code, body=body)
            logger.warning(
                "OpenAI request failed with status %d (%s): %s",
                response.status_code,
                classified.failure_class.value,
                body[:_ERROR_BODY_EXCERPT_CHARS],
            )
            return ProviderResult(
                is_success=False,
                text="",
                status_code=response.status_code,
                error=f"HTTP {response.status_code}",
                failure_class=classified.failure_class,
            )

        try:
            data = response.json()
        except ValueError:
            logger.warning("OpenAI returned a non-JSON envelope from %s", self._url)
            return ProviderResult(
                is_success=False,
                text="",
                status_code=response.status_code,
                error="response body is not JSON",
                failure_class=ProviderFailureClass.UPSTREAM,
            )
        return ProviderResult(
            is_success=True,
            text=extract_output_text(data),
            status_code=response.status_code,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> OpenAIProvider:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


def extract_output_text(data: Any) -> str:
    """Pull the generated text out of a Responses API payload."""

    if not isinstance(data, dict):
        return ""
    output_text = data.get("output_text")
    if isinstance(output_text, str) and output_text:
        return output_text
    output = data.get("output")
    if not isinstance(output, list) or not output or not isinstance(output[0], dict):
        return ""
    content = output[0].get("content")
    if not isinstance(content, list) or not content or not isinstance(content[0], dict):
        return ""
    text = content[0].get("text")
    return text if isinstance(text, str) else ""
