"""Provider-agnostic instruction text for the LLM path."""

from __future__ import annotations

from collections.abc import Sequence

from task_assistant.assistant.context import NormalizedTask
from task_assistant.assistant.intent import Intent

RESPONSE_CONTRACT = """\
You must respond ONLY with valid JSON matching this schema:
{
  "intent": "URGENT" | "PRIORITY" | "SUMMARY" | "UNKNOWN",
  "confidence": number (0 to 1),
  "answer": string,
  "actions": string[],
  "warnings": string[]
}
No markdown, no commentary, no prose. actions and warnings must be arrays."""

EMPTY_TASKS_LINE = "- none"


def build_ai_prompt(
    intent: Intent,
    normalized_tasks: Sequence[NormalizedTask],
    user_message: str,
) -> str:
    task_lines = [_task_line(task) for task in normalized_tasks]
    return "\n".join(
        [
            RESPONSE_CONTRACT,
            f"Intent: {intent.value}",
            f"User: {user_message}",
            "Tasks:",
            "\n".join(task_lines) if task_lines else EMPTY_TASKS_LINE,
        ],
    )


def _task_line(task: NormalizedTask) -> str:
    due = task.due_date or "no due date"
    overdue = "true" if task.is_overdue else "false"
    return f"- {task.title} | {task.status.value} | {due} | overdue={overdue}"
