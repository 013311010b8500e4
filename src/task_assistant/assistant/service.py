"""Caller-side assistant flow: provider selection and failure cooldown."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from task_assistant.assistant.context import AIContext, build_ai_context
from task_assistant.assistant.contracts import AIResponse
from task_assistant.assistant.intent import Intent, detect_intent
from task_assistant.assistant.orchestrator import Provider, RunAIRequest, run_ai_detailed
from task_assistant.assistant.providers.base import LlmProvider
from task_assistant.config import Settings
from task_assistant.tasks.repository import TaskRepository

logger = logging.getLogger(__name__)

COOLDOWN_WARNING = "AI temporarily unavailable — using mock response."


class ProviderCooldown:
    """Suppresses provider attempts for a fixed window after a failure."""

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._seconds = seconds
        self._clock = clock
        self._until = 0.0

    @property
    def cooldown_until(self) -> float:
        return self._until

    def is_active(self) -> bool:
        return self._clock() < self._until

    def trip(self) -> None:
        self._until = self._clock() + self._seconds
        logger.info("Provider cooldown active for %.0f seconds", self._seconds)

    def reset(self) -> None:
        self._until = 0.0


@dataclass(slots=True)
class AssistantReply:
    """One answered message with the routing decisions behind it."""

    intent: Intent
    provider: Provider
    response: AIResponse
    context: AIContext
    cooled_down: bool = False


class AssistantService:
    """Answers messages against the current task snapshot."""

    def __init__(
        self,
        repository: TaskRepository,
        settings: Settings | None = None,
        *,
        provider_client: LlmProvider | None = None,
        cooldown: ProviderCooldown | None = None,
    ) -> None:
        self._repository = repository
        self._settings = settings or Settings()
        self._provider_client = provider_client
        self._cooldown = cooldown or ProviderCooldown(self._settings.provider.cooldown_seconds)

    @property
    def cooldown(self) -> ProviderCooldown:
        return self._cooldown

    def build_context(self, reference_date: str | None = None) -> AIContext:
        return build_ai_context(
            self._repository.list(),
            reference_date=reference_date,
            timezone=self._settings.assistant.timezone,
        )

    def select_provider(self, intent: Intent, requested: Provider | None = None) -> Provider:
        """Known intents are answered deterministically; only UNKNOWN goes to an LLM."""

        if requested is not None:
            return requested
        if intent != Intent.UNKNOWN:
            return Provider.MOCK
        return Provider(self._settings.provider.default_provider)

    def ask(
        self,
        message: str,
        *,
        provider: Provider | None = None,
        reference_date: str | None = None,
    ) -> AssistantReply:
        context = self.build_context(reference_date)
        intent = detect_intent(message)
        selected = self.select_provider(intent, provider)
        logger.info("Intent %s routed to provider %s", intent.value, selected.value)

        warnings: list[str] = []
        cooled_down = False
        if selected != Provider.MOCK and self._cooldown.is_active():
            logger.info("Provider %s suppressed by cooldown", selected.value)
            warnings.append(COOLDOWN_WARNING)
            selected = Provider.MOCK
            cooled_down = True

        result = run_ai_detailed(
            RunAIRequest(
                intent=intent,
                normalized_tasks=context.tasks,
                user_message=message,
                provider=selected,
                reference_date=context.today_iso,
                warnings=warnings,
            ),
            provider_client=self._provider_client,
            settings=self._settings.provider,
            urgent_limit=self._settings.assistant.urgent_limit,
        )
        if result.provider_failed:
            self._cooldown.trip()
        return AssistantReply(
            intent=intent,
            provider=result.provider,
            response=result.response,
            context=context,
            cooled_down=cooled_down,
        )
