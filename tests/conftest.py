"""Shared test fixtures."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from task_assistant.assistant.providers.base import ProviderResult
from task_assistant.tasks.models import Task, TaskStatus

_ENV_VARS = (
    "OPENAI_API_KEY",
    "TASK_ASSISTANT_TASKS_PATH",
    "TASK_ASSISTANT_TIMEZONE",
    "TASK_ASSISTANT_URGENT_LIMIT",
    "TASK_ASSISTANT_PROVIDER",
    "TASK_ASSISTANT_OPENAI_BASE_URL",
    "TASK_ASSISTANT_OPENAI_MODEL",
    "TASK_ASSISTANT_REQUEST_TIMEOUT_SECONDS",
    "TASK_ASSISTANT_COOLDOWN_SECONDS",
    "TASK_ASSISTANT_LOG_LEVEL",
)


@dataclass
class StubProvider:
    """Provider double that replays canned results and records prompts."""

    results: list[ProviderResult]
    name: str = "stub"
    prompts: list[str] = field(default_factory=list)

    def send(self, instruction_text: str) -> ProviderResult:
        self.prompts.append(instruction_text)
        if len(self.results) > 1:
            return self.results.pop(0)
        return self.results[0]


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Keep developer credentials and overrides out of the tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def scenario_tasks() -> list[Task]:
    return [
        Task(id="t1", title="Finish report", status=TaskStatus.DOING, due_date="2026-01-23"),
        Task(id="t2", title="Pay invoices", status=TaskStatus.TODO, due_date="2026-01-22"),
        Task(id="t3", title="Prep client demo", status=TaskStatus.TODO, due_date="2026-01-24"),
    ]


@pytest.fixture()
def mixed_tasks() -> list[Task]:
    return [
        Task(id="t1", title="Finish report", status=TaskStatus.DOING, due_date="2026-01-22"),
        Task(id="t2", title="Prep demo", status=TaskStatus.TODO, due_date="2026-01-23"),
        Task(id="t3", title="Vendor contract", status=TaskStatus.BLOCKED, due_date="2026-01-21"),
        Task(id="t4", title="Close metrics", status=TaskStatus.DONE, due_date="2026-01-20"),
    ]


@pytest.fixture()
def make_provider():
    """Build a `StubProvider` from one or more canned results."""

    def _make(*results: ProviderResult) -> StubProvider:
        return StubProvider(results=list(results))

    return _make
