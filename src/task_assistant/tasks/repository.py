"""Task repositories: the capability the assistant core reads snapshots from."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from task_assistant.tasks.models import InvalidTaskError, Task, TaskStatus, task_from_record

logger = logging.getLogger(__name__)

DEMO_TASKS: tuple[Task, ...] = (
    Task(
        id="task-001",
        title="Draft Q1 roadmap summary",
        status=TaskStatus.DOING,
        due_date="2026-01-28",
    ),
    Task(
        id="task-002",
        title="Follow up on vendor security review",
        status=TaskStatus.BLOCKED,
        due_date="2026-01-30",
    ),
    Task(
        id="task-003",
        title="Prepare demo deck for stakeholders",
        status=TaskStatus.TODO,
        due_date="2026-02-02",
    ),
    Task(
        id="task-004",
        title="Ship dashboard v1 layout polish",
        status=TaskStatus.DOING,
        due_date="2026-01-27",
    ),
    Task(
        id="task-005",
        title="Close out January metrics report",
        status=TaskStatus.DONE,
        due_date="2026-01-24",
    ),
)


class TaskRepository(Protocol):
    """Interface for task storage backends."""

    def list(self) -> list[Task]:
        """Return a snapshot of all tasks in insertion order."""
        raise NotImplementedError

    def append(self, task: Task) -> Task:
        """Store a new task and return it."""
        raise NotImplementedError


class InMemoryTaskRepository:
    """Process-local task list. Lifetime is the lifetime of the instance."""

    def __init__(self, tasks: list[Task] | tuple[Task, ...] = ()) -> None:
        self._tasks: list[Task] = list(tasks)

    @classmethod
    def with_demo_tasks(cls) -> InMemoryTaskRepository:
        return cls(DEMO_TASKS)

    def list(self) -> list[Task]:
        return list(self._tasks)

    def append(self, task: Task) -> Task:
        _ensure_unique_id(self._tasks, task)
        self._tasks.append(task)
        return task


class JsonFileTaskRepository:
    """Tasks stored as a ``{"tasks": [...]}`` JSON document."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def list(self) -> list[Task]:
        if not self._path.exists():
            return []
        return [task_from_record(record) for record in self._load_records()]

    def append(self, task: Task) -> Task:
        tasks = self.list()
        _ensure_unique_id(tasks, task)
        tasks.append(task)
        _write_json(self._path, {"tasks": [item.to_payload() for item in tasks]})
        logger.info("Stored task %s in %s", task.id, self._path)
        return task

    def _load_records(self) -> list[dict[str, Any]]:
        payload = json.loads(self._path.read_text("utf-8"))
        if isinstance(payload, list):
            raw_tasks = payload
        elif isinstance(payload, dict):
            raw_tasks = payload.get("tasks")
        else:
            raw_tasks = None
        if not isinstance(raw_tasks, list):
            raise InvalidTaskError(f"Expected a tasks array in {self._path}")
        records: list[dict[str, Any]] = []
        for item in raw_tasks:
            if not isinstance(item, dict):
                raise InvalidTaskError(f"Task entry must be an object in {self._path}")
            records.append(item)
        return records


def _ensure_unique_id(tasks: list[Task], task: Task) -> None:
    if any(existing.id == task.id for existing in tasks):
        raise InvalidTaskError(f"Task id already exists: {task.id!r}")


def _write_json(path: Path, payload: dict[str, Any]) -> None:
    """Persist JSON payload using deterministic formatting."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True), "utf-8")
