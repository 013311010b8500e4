from __future__ import annotations

import json
from pathlib import Path

import allure
import pytest

from task_assistant.tasks.models import InvalidTaskError, Task, TaskStatus, task_from_payload
from task_assistant.tasks.repository import (
    DEMO_TASKS,
    InMemoryTaskRepository,
    JsonFileTaskRepository,
)

pytestmark = [
    allure.epic("Assistant Core"),
    allure.feature("Task Store"),
]


def test_task_from_payload_trims_and_defaults_status() -> None:
    task = task_from_payload({"id": "t9", "title": "  Pay rent ", "dueDate": " 2026-02-01 "})

    assert task == Task(id="t9", title="Pay rent", status=TaskStatus.TODO, due_date="2026-02-01")


def test_task_from_payload_generates_id() -> None:
    task = task_from_payload({"title": "Pay rent", "dueDate": "2026-02-01", "status": "doing"})

    assert task.id.startswith("task-")
    assert task.status == TaskStatus.DOING


@pytest.mark.parametrize(
    "payload",
    [
        {"title": "", "dueDate": "2026-02-01"},
        {"title": "   ", "dueDate": "2026-02-01"},
        {"title": "Pay rent", "dueDate": ""},
        {"title": "Pay rent"},
        {"title": "Pay rent", "dueDate": "2026-02-01", "status": "waiting"},
        {"title": 42, "dueDate": "2026-02-01"},
    ],
)
def test_task_from_payload_rejects_invalid_input(payload: dict[str, object]) -> None:
    with pytest.raises(InvalidTaskError, match="Invalid payload"):
        task_from_payload(payload)


@pytest.mark.parametrize("due_date", ["2026-1-5", "05/01/2026", "2026-02-30", "tomorrow"])
def test_task_from_payload_rejects_non_iso_due_date(due_date: str) -> None:
    with pytest.raises(InvalidTaskError, match="Expected YYYY-MM-DD"):
        task_from_payload({"title": "Pay rent", "dueDate": due_date})


def test_in_memory_repository_returns_snapshots() -> None:
    repository = InMemoryTaskRepository.with_demo_tasks()

    snapshot = repository.list()
    snapshot.clear()

    assert repository.list() == list(DEMO_TASKS)


def test_in_memory_repository_append_keeps_order_and_rejects_duplicates() -> None:
    repository = InMemoryTaskRepository()
    first = Task(id="a", title="A", status=TaskStatus.TODO, due_date="2026-02-01")
    second = Task(id="b", title="B", status=TaskStatus.DONE, due_date="2026-02-02")

    assert repository.append(first) is first
    repository.append(second)

    assert [task.id for task in repository.list()] == ["a", "b"]
    with pytest.raises(InvalidTaskError, match="already exists"):
        repository.append(first)


def test_json_repository_round_trips_wire_format(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "tasks.json"
    repository = JsonFileTaskRepository(path)
    assert repository.list() == []

    repository.append(Task(id="a", title="A", status=TaskStatus.BLOCKED, due_date="2026-02-01"))

    stored = json.loads(path.read_text("utf-8"))
    assert stored == {
        "tasks": [{"dueDate": "2026-02-01", "id": "a", "status": "blocked", "title": "A"}],
    }
    assert JsonFileTaskRepository(path).list()[0].status == TaskStatus.BLOCKED


def test_json_repository_accepts_bare_array(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    path.write_text(
        json.dumps([{"id": "x", "title": "X", "status": "doing", "dueDate": ""}]),
        "utf-8",
    )

    tasks = JsonFileTaskRepository(path).list()

    assert tasks == [Task(id="x", title="X", status=TaskStatus.DOING, due_date="")]


def test_json_repository_rejects_bad_records(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps({"tasks": [{"id": "x", "title": "X", "status": "??"}]}), "utf-8")

    with pytest.raises(InvalidTaskError, match="status"):
        JsonFileTaskRepository(path).list()
