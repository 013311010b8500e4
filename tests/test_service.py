from __future__ import annotations

import json

import allure

from task_assistant.assistant.intent import Intent
from task_assistant.assistant.orchestrator import (
    INVALID_SHAPE_WARNING,
    REQUEST_FAILED_WARNING,
    Provider,
)
from task_assistant.assistant.providers.base import ProviderResult
from task_assistant.assistant.service import COOLDOWN_WARNING, AssistantService, ProviderCooldown
from task_assistant.config import ProviderSettings, Settings
from task_assistant.tasks.repository import InMemoryTaskRepository

pytestmark = [
    allure.epic("Assistant Core"),
    allure.feature("Assistant Service"),
]

TODAY = "2026-01-23"
_FAILED = ProviderResult(is_success=False, text="", status_code=503, error="HTTP 503")
_VALID = ProviderResult(
    is_success=True,
    text=json.dumps(
        {
            "intent": "UNKNOWN",
            "confidence": 0.9,
            "answer": "LLM answer",
            "actions": [],
            "warnings": [],
        },
    ),
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1_000.0

    def __call__(self) -> float:
        return self.now


def _service(tasks, provider, clock: FakeClock, cooldown_seconds: float = 30.0):
    settings = Settings(provider=ProviderSettings(cooldown_seconds=cooldown_seconds))
    return AssistantService(
        InMemoryTaskRepository(tasks),
        settings,
        provider_client=provider,
        cooldown=ProviderCooldown(cooldown_seconds, clock=clock),
    )


def test_known_intents_are_answered_by_mock(scenario_tasks, make_provider) -> None:
    provider = make_provider(_VALID)
    service = _service(scenario_tasks, provider, FakeClock())

    reply = service.ask("what should I work on first", reference_date=TODAY)

    assert reply.intent == Intent.PRIORITY
    assert reply.provider == Provider.MOCK
    assert reply.response.answer == "You should work on: Pay invoices.\nReason: It is overdue."
    assert reply.context.total_tasks == 3
    assert provider.prompts == []


def test_unknown_intent_goes_to_configured_provider(scenario_tasks, make_provider) -> None:
    provider = make_provider(_VALID)
    service = _service(scenario_tasks, provider, FakeClock())

    reply = service.ask("how is my week looking?", reference_date=TODAY)

    assert reply.intent == Intent.UNKNOWN
    assert reply.provider == Provider.OPENAI
    assert reply.response.answer == "LLM answer"
    assert len(provider.prompts) == 1


def test_explicit_provider_overrides_selection(scenario_tasks, make_provider) -> None:
    service = _service(scenario_tasks, make_provider(_VALID), FakeClock())

    reply = service.ask("summarize", provider=Provider.GEMINI, reference_date=TODAY)

    assert reply.provider == Provider.GEMINI
    assert reply.response.confidence == 0.1


def test_failure_starts_cooldown_and_suppresses_provider(scenario_tasks, make_provider) -> None:
    clock = FakeClock()
    provider = make_provider(_FAILED, _VALID)
    service = _service(scenario_tasks, provider, clock)

    first = service.ask("tell me something", reference_date=TODAY)
    assert first.response.warnings == [REQUEST_FAILED_WARNING]
    assert service.cooldown.is_active()
    assert service.cooldown.cooldown_until == 1_030.0

    clock.now += 29.0
    second = service.ask("tell me something", reference_date=TODAY)
    assert second.cooled_down
    assert second.provider == Provider.MOCK
    assert second.response.warnings == [COOLDOWN_WARNING]
    assert second.response.answer == "You have 3 tasks. 0 blocked, 1 overdue, 0 done."
    assert len(provider.prompts) == 1

    clock.now += 1.0
    third = service.ask("tell me something", reference_date=TODAY)
    assert not third.cooled_down
    assert third.response.answer == "LLM answer"
    assert len(provider.prompts) == 2


def test_invalid_shape_also_starts_cooldown(scenario_tasks, make_provider) -> None:
    provider = make_provider(ProviderResult(is_success=True, text='{"intent": "NOPE"}'))
    service = _service(scenario_tasks, provider, FakeClock())

    reply = service.ask("hmm", reference_date=TODAY)

    assert reply.response.warnings == [INVALID_SHAPE_WARNING]
    assert service.cooldown.is_active()


def test_cooldown_does_not_affect_mock_requests(scenario_tasks, make_provider) -> None:
    service = _service(scenario_tasks, make_provider(_FAILED), FakeClock())
    service.ask("hmm", reference_date=TODAY)

    reply = service.ask("summary please", reference_date=TODAY)

    assert not reply.cooled_down
    assert reply.response.warnings == []


def test_missing_key_placeholder_does_not_start_cooldown(scenario_tasks) -> None:
    service = AssistantService(InMemoryTaskRepository(scenario_tasks), Settings())

    reply = service.ask("hmm", reference_date=TODAY)

    assert reply.response.answer == "[OpenAI placeholder] Missing API key."
    assert not service.cooldown.is_active()


def test_cooldown_reset() -> None:
    clock = FakeClock()
    cooldown = ProviderCooldown(30.0, clock=clock)

    cooldown.trip()
    assert cooldown.is_active()
    cooldown.reset()
    assert not cooldown.is_active()
