"""Provider orchestration with deterministic fallback.

Every path ends in a valid ``AIResponse``: provider failures, malformed
provider output and missing configuration degrade to the deterministic
reply engine with a warning instead of raising.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from task_assistant.assistant.context import NormalizedTask, denormalize_tasks
from task_assistant.assistant.contracts import AIResponse, parse_ai_response, to_response_intent
from task_assistant.assistant.intent import Intent
from task_assistant.assistant.prompts import build_ai_prompt
from task_assistant.assistant.providers.base import (
    LlmProvider,
    ProviderFailureClass,
    ProviderResult,
)
from task_assistant.assistant.providers.openai_provider import OpenAIProvider
from task_assistant.assistant.replies import (
    URGENT_LIST_LIMIT,
    build_priority_response,
    build_reply_for_intent,
    build_summary_response,
    build_urgent_ranked_response,
)
from task_assistant.config import ProviderSettings, Settings
from task_assistant.tasks.models import Task

logger = logging.getLogger(__name__)

KNOWN_INTENT_CONFIDENCE = 1.0
UNKNOWN_INTENT_CONFIDENCE = 0.6
PLACEHOLDER_CONFIDENCE = 0.1

GEMINI_NOT_IMPLEMENTED_WARNING = "Gemini provider not implemented yet."
MISSING_API_KEY_WARNING = "Missing OPENAI_API_KEY."
INVALID_SHAPE_WARNING = "Invalid AIResponse shape from OpenAI."
REQUEST_FAILED_WARNING = "OpenAI request failed; using deterministic fallback."


class Provider(str, Enum):
    """Response paths selectable by the caller."""

    MOCK = "mock"
    OPENAI = "openai"
    GEMINI = "gemini"


@dataclass(slots=True)
class RunAIRequest:
    """Inputs for one orchestrated reply."""

    intent: Intent
    normalized_tasks: Sequence[NormalizedTask]
    user_message: str
    provider: Provider
    reference_date: str | None = None
    warnings: list[str] = field(default_factory=list)


@dataclass(slots=True)
class AIRunResult:
    """Orchestrated reply plus whether the provider call failed."""

    response: AIResponse
    provider: Provider
    provider_failed: bool = False
    failure_reason: str | None = None


def build_mock_response(  # noqa: PLR0913
    intent: Intent,
    tasks: Sequence[Task],
    user_message: str,
    warnings: Sequence[str] = (),
    reference_date: str | None = None,
    urgent_limit: int = URGENT_LIST_LIMIT,
) -> AIResponse:
    """Wrap the deterministic reply in the response contract."""

    if intent == Intent.SUMMARY:
        answer = build_summary_response(tasks, reference_date)
    elif intent == Intent.URGENT:
        answer = build_urgent_ranked_response(tasks, reference_date, limit=urgent_limit)
    elif intent == Intent.PRIORITY:
        answer = build_priority_response(tasks, reference_date)
    else:
        answer = build_reply_for_intent(
            intent,
            tasks,
            reference_date,
            message=user_message,
            urgent_limit=urgent_limit,
        )
    return AIResponse(
        intent=to_response_intent(intent),
        confidence=(
            UNKNOWN_INTENT_CONFIDENCE if intent == Intent.UNKNOWN else KNOWN_INTENT_CONFIDENCE
        ),
        answer=answer,
        actions=[],
        warnings=list(warnings),
    )


def run_ai(
    request: RunAIRequest,
    *,
    provider_client: LlmProvider | None = None,
    settings: ProviderSettings | None = None,
    urgent_limit: int = URGENT_LIST_LIMIT,
) -> AIResponse:
    """Produce a reply for the selected provider; never raises on provider failure."""

    return run_ai_detailed(
        request,
        provider_client=provider_client,
        settings=settings,
        urgent_limit=urgent_limit,
    ).response


def run_ai_detailed(
    request: RunAIRequest,
    *,
    provider_client: LlmProvider | None = None,
    settings: ProviderSettings | None = None,
    urgent_limit: int = URGENT_LIST_LIMIT,
) -> AIRunResult:
    """Like `run_ai`, but also report whether the provider attempt failed.

    ``settings`` defaults to the provider settings read from the environment
    at call time. ``provider_client`` overrides the client built from them;
    when it is given the credential check is skipped.
    """

    tasks = denormalize_tasks(request.normalized_tasks)

    if request.provider == Provider.MOCK:
        return AIRunResult(
            response=build_mock_response(
                request.intent,
                tasks,
                request.user_message,
                warnings=request.warnings,
                reference_date=request.reference_date,
                urgent_limit=urgent_limit,
            ),
            provider=Provider.MOCK,
        )

    if request.provider == Provider.GEMINI:
        return AIRunResult(
            response=AIResponse(
                intent=to_response_intent(request.intent),
                confidence=PLACEHOLDER_CONFIDENCE,
                answer=(
                    f"[LLM placeholder] Intent: {request.intent.value}, "
                    f"Tasks: {len(request.normalized_tasks)}"
                ),
                actions=[],
                warnings=[*request.warnings, GEMINI_NOT_IMPLEMENTED_WARNING],
            ),
            provider=Provider.GEMINI,
        )

    provider_settings = settings or Settings.from_env().provider
    if provider_client is None and not provider_settings.openai_api_key:
        logger.info("OpenAI provider selected without OPENAI_API_KEY; returning placeholder")
        return AIRunResult(
            response=AIResponse(
                intent=to_response_intent(request.intent),
                confidence=PLACEHOLDER_CONFIDENCE,
                answer="[OpenAI placeholder] Missing API key.",
                actions=[],
                warnings=[*request.warnings, MISSING_API_KEY_WARNING],
            ),
            provider=Provider.OPENAI,
        )

    prompt = build_ai_prompt(request.intent, request.normalized_tasks, request.user_message)
    result = send_prompt(prompt, provider_client=provider_client, settings=provider_settings)

    if not result.is_success:
        reason = result.error
        if result.failure_class is not None:
            reason = f"{result.failure_class.value}: {result.error}"
        logger.info("Falling back to deterministic reply: %s", reason)
        return _fallback(request, tasks, REQUEST_FAILED_WARNING, reason, urgent_limit)

    validation = parse_ai_response(result.text)
    if not validation.is_parsed:
        logger.warning(
            "Undecodable provider output (%s): %.200s",
            validation.error_summary,
            result.text,
        )
        return _fallback(
            request,
            tasks,
            REQUEST_FAILED_WARNING,
            validation.error_summary,
            urgent_limit,
        )
    if not validation.is_valid or validation.response is None:
        logger.warning(
            "Rejected provider output (%s): %.200s",
            validation.error_summary,
            result.text,
        )
        return _fallback(
            request,
            tasks,
            INVALID_SHAPE_WARNING,
            validation.error_summary,
            urgent_limit,
        )
    return AIRunResult(response=validation.response, provider=Provider.OPENAI)


def send_prompt(
    prompt: str,
    *,
    provider_client: LlmProvider | None,
    settings: ProviderSettings,
) -> ProviderResult:
    """Send one prompt; client construction and send errors become failed results."""

    if provider_client is not None:
        return _send_once(provider_client, prompt)
    try:
        client = OpenAIProvider.from_settings(settings)
    except Exception as error:  # noqa: BLE001
        logger.exception("Could not build the OpenAI client")
        return ProviderResult(
            is_success=False,
            text="",
            error=str(error) or type(error).__name__,
            failure_class=ProviderFailureClass.CONFIG,
        )
    with client:
        return _send_once(client, prompt)


def _send_once(client: LlmProvider, prompt: str) -> ProviderResult:
    try:
        return client.send(prompt)
    except Exception as error:  # noqa: BLE001
        logger.exception("Provider %s raised during send", getattr(client, "name", "unknown"))
        return ProviderResult(is_success=False, text="", error=str(error) or type(error).__name__)


def _fallback(
    request: RunAIRequest,
    tasks: list[Task],
    warning: str,
    failure_reason: str | None,
    urgent_limit: int,
) -> AIRunResult:
    return AIRunResult(
        response=build_mock_response(
            request.intent,
            tasks,
            request.user_message,
            warnings=[*request.warnings, warning],
            reference_date=request.reference_date,
            urgent_limit=urgent_limit,
        ),
        provider=Provider.OPENAI,
        provider_failed=True,
        failure_reason=failure_reason or warning,
    )
