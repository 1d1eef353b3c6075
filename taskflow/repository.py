"""Task storage."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod

from taskflow.model import Task


class RepositoryError(Exception):
    """Base class for storage errors."""


class TaskAlreadyExistsError(RepositoryError):
    """A task with the same ID is already stored."""


class TaskNotFoundError(RepositoryError):
    """No task with the requested ID is stored."""


class TaskRepository(ABC):
    """Storage interface for tasks."""

    @abstractmethod
    def create(self, task: Task) -> None:
        """Store a new task."""

    @abstractmethod
    def get_by_id(self, task_id: str) -> Task:
        """Return the task with this ID."""

    @abstractmethod
    def update(self, task: Task) -> None:
        """Replace a stored task."""

    @abstractmethod
    def delete(self, task_id: str) -> None:
        """Remove the task with this ID."""

    @abstractmethod
    def get_all(self) -> list[Task]:
        """Return every stored task."""


class MemoryRepository(TaskRepository):
    """Thread-safe in-memory task storage."""

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._lock = threading.Lock()

    def create(self, task: Task) -> None:
        if task is None:
            raise ValueError("task cannot be None")
        with self._lock:
            if task.id in self._tasks:
                raise TaskAlreadyExistsError(f"task with ID {task.id} already exists")
            self._tasks[task.id] = task

    def get_by_id(self, task_id: str) -> Task:
        with self._lock:
            try:
                return self._tasks[task_id]
            except KeyError:
                raise TaskNotFoundError(f"task with ID {task_id} not found") from None

    def update(self, task: Task) -> None:
        if task is None:
            raise ValueError("task cannot be None")
        with self._lock:
            if task.id not in self._tasks:
                raise TaskNotFoundError(f"task with ID {task.id} not found")
            self._tasks[task.id] = task

    def delete(self, task_id: str) -> None:
        with self._lock:
            if self._tasks.pop(task_id, None) is None:
                raise TaskNotFoundError(f"task with ID {task_id} not found")

    def get_all(self) -> list[Task]:
        with self._lock:
            return list(self._tasks.values())