"""Task records and repositories."""

from task_assistant.tasks.models import InvalidTaskError, Task, TaskStatus, task_from_payload
from task_assistant.tasks.repository import (
    InMemoryTaskRepository,
    JsonFileTaskRepository,
    TaskRepository,
)

__all__ = [
    "InMemoryTaskRepository",
    "InvalidTaskError",
    "JsonFileTaskRepository",
    "Task",
    "TaskRepository",
    "TaskStatus",
    "task_from_payload",
]
