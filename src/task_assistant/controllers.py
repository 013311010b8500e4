"""Controllers for assistant CLI commands."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from task_assistant.assistant.emails import analyze_email, email_from_payload
from task_assistant.assistant.intent import detect_intent
from task_assistant.assistant.orchestrator import Provider
from task_assistant.assistant.prompts import build_ai_prompt
from task_assistant.assistant.service import AssistantReply, AssistantService
from task_assistant.config import Settings
from task_assistant.tasks.models import is_iso_date, task_from_payload
from task_assistant.tasks.repository import (
    InMemoryTaskRepository,
    JsonFileTaskRepository,
    TaskRepository,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AskCommand:
    """CLI input for a single question."""

    message: str
    tasks_path: Path | None
    provider: str | None
    today: str | None
    as_json: bool = False


@dataclass(slots=True)
class ChatCommand:
    """CLI input for an interactive session."""

    tasks_path: Path | None
    provider: str | None
    today: str | None


@dataclass(slots=True)
class ContextCommand:
    """CLI input for context inspection."""

    tasks_path: Path | None
    today: str | None


@dataclass(slots=True)
class PromptCommand:
    """CLI input for prompt rendering."""

    message: str
    tasks_path: Path | None
    today: str | None


@dataclass(slots=True)
class ListTasksCommand:
    """CLI input for task listing."""

    tasks_path: Path | None


@dataclass(slots=True)
class AddTaskCommand:
    """CLI input for task creation."""

    tasks_path: Path | None
    title: str
    status: str
    due_date: str


@dataclass(slots=True)
class AnalyzeEmailCommand:
    """CLI input for single-email triage."""

    email_id: str
    subject: str
    snippet: str
    as_json: bool = False


class AssistantCliController:
    """Coordinates assistant command execution."""

    def ask(self, command: AskCommand) -> list[str]:
        service = self.open_session(
            ChatCommand(
                tasks_path=command.tasks_path,
                provider=command.provider,
                today=command.today,
            ),
        )
        reply = service.ask(
            command.message,
            provider=_parse_provider(command.provider),
            reference_date=_parse_reference_date(command.today),
        )
        if command.as_json:
            return [json.dumps(reply.response.to_dict(), ensure_ascii=False, indent=2)]
        return render_reply_lines(reply)

    def open_session(self, command: ChatCommand) -> AssistantService:
        settings = _load_settings(command.tasks_path)
        _parse_provider(command.provider)
        _parse_reference_date(command.today)
        return AssistantService(_repository(settings), settings)

    def chat_turn(self, service: AssistantService, message: str, command: ChatCommand) -> list[str]:
        reply = service.ask(
            message,
            provider=_parse_provider(command.provider),
            reference_date=_parse_reference_date(command.today),
        )
        return render_reply_lines(reply)

    def context(self, command: ContextCommand) -> list[str]:
        settings = _load_settings(command.tasks_path)
        service = AssistantService(_repository(settings), settings)
        context = service.build_context(_parse_reference_date(command.today))
        return [json.dumps(context.to_payload(), ensure_ascii=False, indent=2)]

    def prompt(self, command: PromptCommand) -> list[str]:
        settings = _load_settings(command.tasks_path)
        service = AssistantService(_repository(settings), settings)
        context = service.build_context(_parse_reference_date(command.today))
        intent = detect_intent(command.message)
        return build_ai_prompt(intent, context.tasks, command.message).splitlines()

    def list_tasks(self, command: ListTasksCommand) -> list[str]:
        settings = _load_settings(command.tasks_path)
        tasks = _repository(settings).list()
        if not tasks:
            return ["No tasks."]
        return [
            f"{task.id}\t{task.status.value}\t{task.due_date or '-'}\t{task.title}"
            for task in tasks
        ]

    def add_task(self, command: AddTaskCommand) -> list[str]:
        settings = _load_settings(command.tasks_path)
        if settings.assistant.tasks_path is None:
            raise ValueError(
                "A task file is required to add tasks. "
                "Set TASK_ASSISTANT_TASKS_PATH or pass --tasks-file.",
            )
        task = task_from_payload(
            {"title": command.title, "status": command.status, "dueDate": command.due_date},
        )
        stored = JsonFileTaskRepository(settings.assistant.tasks_path).append(task)
        return [f"task_id={stored.id}", f"status={stored.status.value}", f"due={stored.due_date}"]

    def triage_email(self, command: AnalyzeEmailCommand) -> list[str]:
        settings = _load_settings(None)
        email = email_from_payload(
            {"id": command.email_id, "subject": command.subject, "snippet": command.snippet},
        )
        analysis = analyze_email(email, settings=settings.provider)
        if command.as_json:
            return [json.dumps(analysis.to_dict(), ensure_ascii=False, indent=2)]
        return [
            f"email_id={email.id}",
            f"intent={analysis.intent or '-'}",
            f"urgent={str(analysis.urgent).lower()}",
            f"suggested_action={analysis.suggested_action or '-'}",
        ]


def render_reply_lines(reply: AssistantReply) -> list[str]:
    response = reply.response
    lines = [
        f"intent={reply.intent.value} provider={reply.provider.value} "
        f"confidence={response.confidence:.2f}",
    ]
    lines.extend(response.answer.splitlines() or [""])
    lines.extend(f"action: {action}" for action in response.actions)
    lines.extend(f"warning: {warning}" for warning in response.warnings)
    return lines


def _load_settings(tasks_path: Path | None) -> Settings:
    settings = Settings.from_env(tasks_path=tasks_path)
    settings.validate()
    return settings


def _repository(settings: Settings) -> TaskRepository:
    if settings.assistant.tasks_path is None:
        logger.debug("No task file configured; using demo tasks")
        return InMemoryTaskRepository.with_demo_tasks()
    return JsonFileTaskRepository(settings.assistant.tasks_path)


def _parse_provider(value: str | None) -> Provider | None:
    if value is None:
        return None
    try:
        return Provider(value.strip().lower())
    except ValueError as error:
        supported = ", ".join(item.value for item in Provider)
        raise ValueError(f"Unsupported provider: {value!r}. Use one of {supported}.") from error


def _parse_reference_date(value: str | None) -> str | None:
    if value is None:
        return None
    candidate = value.strip()
    if not is_iso_date(candidate):
        raise ValueError(f"Invalid reference date: {value!r}. Expected YYYY-MM-DD.")
    return candidate
