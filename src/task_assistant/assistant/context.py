"""Task context normalization relative to a reference date."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from task_assistant.tasks.models import Task, TaskStatus

DEFAULT_TIMEZONE = "Asia/Dubai"


def today_iso() -> str:
    """Current UTC date as ``YYYY-MM-DD``."""

    return datetime.now(UTC).date().isoformat()


@dataclass(frozen=True, slots=True)
class NormalizedTask:
    """Task view annotated with the overdue flag."""

    id: str
    title: str
    status: TaskStatus
    due_date: str
    is_overdue: bool

    def to_task(self) -> Task:
        return Task(id=self.id, title=self.title, status=self.status, due_date=self.due_date)

    def to_payload(self) -> dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
            "dueDate": self.due_date,
            "isOverdue": self.is_overdue,
        }


@dataclass(slots=True)
class AIContext:
    """Aggregate view over normalized tasks."""

    today_iso: str
    timezone: str
    total_tasks: int
    counts: dict[TaskStatus, int]
    overdue_count: int
    tasks: list[NormalizedTask] = field(default_factory=list)

    def to_payload(self) -> dict[str, object]:
        return {
            "todayISO": self.today_iso,
            "timezone": self.timezone,
            "totalTasks": self.total_tasks,
            "counts": {status.value: count for status, count in self.counts.items()},
            "overdueCount": self.overdue_count,
            "tasks": [task.to_payload() for task in self.tasks],
        }


def is_overdue(task: Task, reference_date: str) -> bool:
    # ISO dates are zero-padded, so string order is calendar order.
    return (
        bool(task.due_date)
        and task.due_date < reference_date
        and task.status not in (TaskStatus.BLOCKED, TaskStatus.DONE)
    )


def normalize_task(task: Task, reference_date: str) -> NormalizedTask:
    return NormalizedTask(
        id=task.id,
        title=task.title,
        status=task.status,
        due_date=task.due_date,
        is_overdue=is_overdue(task, reference_date),
    )


def build_ai_context(
    tasks: Sequence[Task],
    reference_date: str | None = None,
    timezone: str = DEFAULT_TIMEZONE,
) -> AIContext:
    """Normalize tasks and count them per status and overdue state."""

    reference = reference_date or today_iso()
    counts = {status: 0 for status in TaskStatus}
    normalized: list[NormalizedTask] = []
    for task in tasks:
        counts[task.status] += 1
        normalized.append(normalize_task(task, reference))

    return AIContext(
        today_iso=reference,
        timezone=timezone,
        total_tasks=len(normalized),
        counts=counts,
        overdue_count=sum(1 for task in normalized if task.is_overdue),
        tasks=normalized,
    )


def denormalize_tasks(normalized_tasks: Sequence[NormalizedTask]) -> list[Task]:
    return [task.to_task() for task in normalized_tasks]
