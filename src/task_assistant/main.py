"""CLI entrypoint for task-assistant."""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import rich_click as click

from task_assistant import __version__
from task_assistant.assistant.emails import EmailAnalysisError, InvalidEmailError
from task_assistant.config import Settings
from task_assistant.controllers import (
    AddTaskCommand,
    AnalyzeEmailCommand,
    AskCommand,
    AssistantCliController,
    ChatCommand,
    ContextCommand,
    ListTasksCommand,
    PromptCommand,
)
from task_assistant.tasks.models import InvalidTaskError, TaskStatus

click.rich_click.USE_MARKDOWN = True
T = TypeVar("T")
ASSISTANT_CONTROLLER = AssistantCliController()

_EXIT_WORDS = {"exit", "quit"}
_PROVIDER_CHOICES = click.Choice(["mock", "openai", "gemini"], case_sensitive=False)
_tasks_file_option = click.option(
    "--tasks-file",
    "tasks_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="JSON task file. Demo tasks are used when omitted.",
)
_today_option = click.option(
    "--today",
    default=None,
    help="Reference date as YYYY-MM-DD. Defaults to the current UTC date.",
)
_provider_option = click.option(
    "--provider",
    type=_PROVIDER_CHOICES,
    default=None,
    help="Force a response path. By default only unrecognized requests reach the LLM.",
)


@click.group()
@click.version_option(version=__version__, prog_name="task-assistant")
def task_assistant() -> None:
    """Task-aware assistant CLI."""

    level = _run(Settings.from_env).log_level
    logging.basicConfig(level=getattr(logging, level, logging.WARNING))


@task_assistant.command("ask")
@click.argument("message")
@_tasks_file_option
@_provider_option
@_today_option
@click.option("--json", "as_json", is_flag=True, help="Print the raw AIResponse JSON.")
def ask(
    message: str,
    tasks_path: Path | None,
    provider: str | None,
    today: str | None,
    as_json: bool,
) -> None:
    """Answer one question about your tasks."""

    _emit_lines(
        _run(
            ASSISTANT_CONTROLLER.ask,
            AskCommand(
                message=message,
                tasks_path=tasks_path,
                provider=provider,
                today=today,
                as_json=as_json,
            ),
        ),
    )


@task_assistant.command("chat")
@_tasks_file_option
@_provider_option
@_today_option
def chat(tasks_path: Path | None, provider: str | None, today: str | None) -> None:
    """Answer messages read line by line from stdin until `exit`."""

    command = ChatCommand(tasks_path=tasks_path, provider=provider, today=today)
    service = _run(ASSISTANT_CONTROLLER.open_session, command)
    for raw_line in click.get_text_stream("stdin"):
        message = raw_line.strip()
        if not message:
            continue
        if message.lower() in _EXIT_WORDS:
            break
        _emit_lines(_run(ASSISTANT_CONTROLLER.chat_turn, service, message, command))


@task_assistant.command("context")
@_tasks_file_option
@_today_option
def context(tasks_path: Path | None, today: str | None) -> None:
    """Print the normalized task context as JSON."""

    _emit_lines(
        _run(ASSISTANT_CONTROLLER.context, ContextCommand(tasks_path=tasks_path, today=today)),
    )


@task_assistant.command("prompt")
@click.argument("message")
@_tasks_file_option
@_today_option
def prompt(message: str, tasks_path: Path | None, today: str | None) -> None:
    """Print the instruction text that would be sent to the LLM."""

    _emit_lines(
        _run(
            ASSISTANT_CONTROLLER.prompt,
            PromptCommand(message=message, tasks_path=tasks_path, today=today),
        ),
    )


@task_assistant.group()
def tasks() -> None:
    """Task store commands."""


@tasks.command("list")
@_tasks_file_option
def tasks_list(tasks_path: Path | None) -> None:
    """List stored tasks."""

    _emit_lines(_run(ASSISTANT_CONTROLLER.list_tasks, ListTasksCommand(tasks_path=tasks_path)))


@tasks.command("add")
@_tasks_file_option
@click.option("--title", required=True, help="Task title.")
@click.option(
    "--status",
    type=click.Choice([status.value for status in TaskStatus]),
    default=TaskStatus.TODO.value,
    show_default=True,
    help="Initial status.",
)
@click.option("--due-date", required=True, help="Due date as YYYY-MM-DD.")
def tasks_add(tasks_path: Path | None, title: str, status: str, due_date: str) -> None:
    """Append a task to the task file."""

    _emit_lines(
        _run(
            ASSISTANT_CONTROLLER.add_task,
            AddTaskCommand(tasks_path=tasks_path, title=title, status=status, due_date=due_date),
        ),
    )


@task_assistant.group()
def emails() -> None:
    """Email triage commands."""


@emails.command("analyze")
@click.option("--id", "email_id", required=True, help="Email UUID.")
@click.option("--subject", required=True, help="Email subject line.")
@click.option("--snippet", default="", help="Email body excerpt.")
@click.option("--json", "as_json", is_flag=True, help="Print the analysis as JSON.")
def emails_analyze(email_id: str, subject: str, snippet: str, as_json: bool) -> None:
    """Classify one email with the LLM: intent, urgency and a suggested action.

    Requires `OPENAI_API_KEY`; there is no offline fallback.
    """

    _emit_lines(
        _run(
            ASSISTANT_CONTROLLER.triage_email,
            AnalyzeEmailCommand(
                email_id=email_id,
                subject=subject,
                snippet=snippet,
                as_json=as_json,
            ),
        ),
    )


def _run(handler: Callable[..., T], *args: object) -> T:
    try:
        return handler(*args)
    except (ValueError, InvalidTaskError, InvalidEmailError, EmailAnalysisError) as error:
        raise click.ClickException(str(error)) from error


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    task_assistant()
