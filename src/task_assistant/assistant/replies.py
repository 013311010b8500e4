"""Deterministic, network-free replies derived from the task list."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta

from task_assistant.assistant.context import today_iso
from task_assistant.assistant.intent import (
    BLOCKED_PATTERNS,
    DUE_TODAY_PATTERNS,
    OVERDUE_PATTERNS,
    SUMMARY_PATTERNS,
    Intent,
    first_match,
)
from task_assistant.tasks.models import Task, TaskStatus

URGENT_LIST_LIMIT = 5

NO_TASKS_MESSAGE = "You have no tasks yet."
ALL_DONE_MESSAGE = "All tasks are completed 🎉"
ALL_BLOCKED_MESSAGE = "All remaining tasks are blocked."
NO_URGENT_MESSAGE = "No urgent tasks right now."

RANK_OVERDUE = 0
RANK_DUE_TODAY = 1
RANK_DOING = 2
RANK_TODO = 3
RANK_OTHER = 4


@dataclass(slots=True)
class TaskSummary:
    """Per-status counts plus the task subsets the replies quote."""

    today: str
    total: int
    counts: dict[TaskStatus, int]
    due_today: list[Task] = field(default_factory=list)
    overdue: list[Task] = field(default_factory=list)
    blocked: list[Task] = field(default_factory=list)


def summarize_tasks(tasks: Sequence[Task], reference_date: str | None = None) -> TaskSummary:
    today = reference_date or today_iso()
    counts = {status: 0 for status in TaskStatus}
    for task in tasks:
        counts[task.status] += 1
    return TaskSummary(
        today=today,
        total=len(tasks),
        counts=counts,
        due_today=[task for task in tasks if task.due_date == today],
        overdue=[
            task
            for task in tasks
            if task.due_date and task.due_date < today and task.status != TaskStatus.DONE
        ],
        blocked=[task for task in tasks if task.status == TaskStatus.BLOCKED],
    )


def rank_key(task: Task, reference_date: str) -> int:
    if task.due_date and task.due_date < reference_date and task.status != TaskStatus.DONE:
        return RANK_OVERDUE
    if task.due_date and task.due_date == reference_date and task.status != TaskStatus.DONE:
        return RANK_DUE_TODAY
    if task.status == TaskStatus.DOING:
        return RANK_DOING
    if task.status == TaskStatus.TODO:
        return RANK_TODO
    return RANK_OTHER


def rank_urgent_tasks(tasks: Sequence[Task], reference_date: str | None = None) -> list[Task]:
    """Order actionable tasks by urgency.

    Done and blocked tasks are excluded. ``sorted`` is stable, so tasks with
    the same rank keep their input order.
    """

    today = reference_date or today_iso()
    eligible = [
        task for task in tasks if task.status not in (TaskStatus.DONE, TaskStatus.BLOCKED)
    ]
    return sorted(eligible, key=lambda task: rank_key(task, today))


def format_due_text(task: Task, reference_date: str) -> str:
    if not task.due_date:
        return "no due date"
    if task.due_date == reference_date:
        return "due today"
    if task.due_date == _tomorrow_iso(reference_date):
        return "due tomorrow"
    return f"due {task.due_date}"


def build_summary_response(tasks: Sequence[Task], reference_date: str | None = None) -> str:
    summary = summarize_tasks(tasks, reference_date)
    return f"{_counts_line(summary)} Overdue: {len(summary.overdue)}."


def build_urgent_ranked_response(
    tasks: Sequence[Task],
    reference_date: str | None = None,
    limit: int = URGENT_LIST_LIMIT,
) -> str:
    today = reference_date or today_iso()
    edge_case = _edge_case_message(tasks)
    if edge_case is not None:
        return edge_case
    ranked = rank_urgent_tasks(tasks, today)[:limit]
    if not ranked:
        return NO_URGENT_MESSAGE
    return "\n".join(
        f"{index}. {task.title} — {task.status.value} — {format_due_text(task, today)}"
        for index, task in enumerate(ranked, start=1)
    )


def build_priority_response(tasks: Sequence[Task], reference_date: str | None = None) -> str:
    # Unlike the urgent list there is no all-done/all-blocked pre-check here.
    today = reference_date or today_iso()
    ranked = rank_urgent_tasks(tasks, today)
    if not ranked:
        return NO_URGENT_MESSAGE
    top = ranked[0]
    return f"You should work on: {top.title}.\nReason: {_priority_reason(top, today)}"


def build_reply_for_intent(
    intent: Intent,
    tasks: Sequence[Task],
    reference_date: str | None = None,
    message: str = "",
    urgent_limit: int = URGENT_LIST_LIMIT,
) -> str:
    """Answer a classified request from the task list alone."""

    today = reference_date or today_iso()
    if intent == Intent.DUE_TODAY:
        return _due_today_reply(summarize_tasks(tasks, today))
    if intent == Intent.OVERDUE:
        return _overdue_reply(summarize_tasks(tasks, today))
    if intent == Intent.BLOCKED:
        return _blocked_reply(summarize_tasks(tasks, today))
    if intent == Intent.LIST_ALL:
        if not tasks:
            return NO_TASKS_MESSAGE
        return f"All tasks ({len(tasks)}): {_join_titles(tasks)}."
    if intent == Intent.SUMMARY:
        return build_summary_response(tasks, today)
    if intent == Intent.URGENT:
        return build_urgent_ranked_response(tasks, today, limit=urgent_limit)
    if intent == Intent.PRIORITY:
        return build_priority_response(tasks, today)
    return build_deterministic_reply(message, tasks, today)


def build_deterministic_reply(
    message: str,
    tasks: Sequence[Task],
    reference_date: str | None = None,
) -> str:
    """Freeform fallback: re-check trigger phrases, else report counts."""

    haystack = message.lower()
    summary = summarize_tasks(tasks, reference_date)
    if first_match(haystack, DUE_TODAY_PATTERNS) is not None:
        return _due_today_reply(summary)
    if first_match(haystack, OVERDUE_PATTERNS) is not None:
        return _overdue_reply(summary)
    if first_match(haystack, BLOCKED_PATTERNS) is not None:
        return _blocked_reply(summary)
    if first_match(haystack, SUMMARY_PATTERNS) is not None:
        return _counts_line(summary)
    return (
        f"You have {summary.total} tasks. "
        f"{summary.counts[TaskStatus.BLOCKED]} blocked, "
        f"{len(summary.overdue)} overdue, "
        f"{summary.counts[TaskStatus.DONE]} done."
    )


def _edge_case_message(tasks: Sequence[Task]) -> str | None:
    if not tasks:
        return NO_TASKS_MESSAGE
    active = [task for task in tasks if task.status != TaskStatus.DONE]
    if not active:
        return ALL_DONE_MESSAGE
    if all(task.status == TaskStatus.BLOCKED for task in active):
        return ALL_BLOCKED_MESSAGE
    return None


def _priority_reason(task: Task, reference_date: str) -> str:
    if task.due_date and task.due_date < reference_date:
        return "It is overdue."
    if task.due_date == reference_date:
        return "It is due today."
    if task.status == TaskStatus.DOING:
        return "It is currently in progress."
    if task.status == TaskStatus.TODO:
        return "It is next in your queue."
    return f"It is {format_due_text(task, reference_date)}."


def _due_today_reply(summary: TaskSummary) -> str:
    if not summary.due_today:
        return "No tasks are due today."
    return f"Tasks due today: {_join_titles(summary.due_today)}."


def _overdue_reply(summary: TaskSummary) -> str:
    if not summary.overdue:
        return "You have no overdue tasks."
    return f"Overdue tasks ({len(summary.overdue)}): {_join_titles(summary.overdue)}."


def _blocked_reply(summary: TaskSummary) -> str:
    if not summary.blocked:
        return "No tasks are currently blocked."
    return f"Blocked tasks ({len(summary.blocked)}): {_join_titles(summary.blocked)}."


def _counts_line(summary: TaskSummary) -> str:
    counts = summary.counts
    return (
        f"Summary: {summary.total} total — "
        f"{counts[TaskStatus.TODO]} todo, "
        f"{counts[TaskStatus.DOING]} doing, "
        f"{counts[TaskStatus.BLOCKED]} blocked, "
        f"{counts[TaskStatus.DONE]} done."
    )


def _join_titles(tasks: Sequence[Task]) -> str:
    return "; ".join(task.title for task in tasks)


def _tomorrow_iso(reference_date: str) -> str:
    return (date.fromisoformat(reference_date) + timedelta(days=1)).isoformat()
