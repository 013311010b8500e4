"""Task records owned by the persistence collaborator."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class TaskStatus(str, Enum):
    """Task lifecycle states."""

    TODO = "todo"
    DOING = "doing"
    BLOCKED = "blocked"
    DONE = "done"


@dataclass(slots=True)
class InvalidTaskError(Exception):
    """Raised when a task payload fails validation."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class Task:
    """One task snapshot. `due_date` is a zero-padded ISO date or empty."""

    id: str
    title: str
    status: TaskStatus
    due_date: str

    def to_payload(self) -> dict[str, str]:
        """Serialize using the wire field names."""

        return {
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
            "dueDate": self.due_date,
        }


def task_from_payload(payload: dict[str, Any]) -> Task:
    """Validate a creation payload and build a task.

    Title and a ``YYYY-MM-DD`` due date are required after trimming; status
    defaults to ``todo``. A missing id is generated from the current epoch milliseconds.
    """

    raw_title = payload.get("title")
    raw_due_date = payload.get("dueDate")
    raw_status = payload.get("status")
    raw_id = payload.get("id")

    title = raw_title.strip() if isinstance(raw_title, str) else ""
    due_date = raw_due_date.strip() if isinstance(raw_due_date, str) else ""
    status = parse_status(raw_status if raw_status is not None else TaskStatus.TODO.value)
    if not title or not due_date or status is None:
        raise InvalidTaskError("Invalid payload. Provide title, dueDate, and valid status.")
    if not is_iso_date(due_date):
        raise InvalidTaskError(f"Invalid dueDate: {due_date!r}. Expected YYYY-MM-DD.")

    if raw_id is not None and not isinstance(raw_id, str):
        raise InvalidTaskError("Task id must be a string when provided.")
    task_id = raw_id.strip() if isinstance(raw_id, str) and raw_id.strip() else _new_task_id()
    return Task(id=task_id, title=title, status=status, due_date=due_date)


def task_from_record(record: dict[str, Any]) -> Task:
    """Load a stored task record without applying creation defaults."""

    task_id = record.get("id")
    title = record.get("title")
    due_date = record.get("dueDate", "")
    status = parse_status(record.get("status"))
    if not isinstance(task_id, str) or not task_id.strip():
        raise InvalidTaskError("task.id must be a non-empty string")
    if not isinstance(title, str):
        raise InvalidTaskError("task.title must be a string")
    if not isinstance(due_date, str):
        raise InvalidTaskError("task.dueDate must be a string")
    if status is None:
        raise InvalidTaskError(f"task.status is invalid for task {task_id!r}")
    return Task(id=task_id, title=title, status=status, due_date=due_date)


def is_iso_date(value: str) -> bool:
    """True for a zero-padded calendar date such as ``2026-01-05``."""

    if not _ISO_DATE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def parse_status(value: object) -> TaskStatus | None:
    if not isinstance(value, str):
        return None
    try:
        return TaskStatus(value.strip().lower())
    except ValueError:
        return None


def _new_task_id() -> str:
    return f"task-{int(time.time() * 1000)}"
