"""Task manager with a pool of background workers."""

from __future__ import annotations

import logging
import queue
import random
import threading
from datetime import datetime, timezone

from taskflow.model import Task, TaskStatus
from taskflow.repository import (
    RepositoryError,
    TaskAlreadyExistsError,
    TaskNotFoundError,
    TaskRepository,
)

logger = logging.getLogger(__name__)

_TEST_DURATION = 0.1


class TaskRunningError(Exception):
    """A running task cannot be deleted."""

    def __init__(self, message: str = "cannot delete running task") -> None:
        super().__init__(message)


class TaskManager:
    """Creates tasks and executes them on a fixed pool of worker threads."""

    def __init__(self, repo: TaskRepository, workers: int, *, test_mode: bool = False) -> None:
        if workers < 0:
            raise ValueError("workers must not be negative")
        self.repo = repo
        self.workers = workers
        self.test_mode = test_mode
        self._capacity = workers * 2
        self._queue: queue.Queue[Task | None] = queue.Queue(maxsize=max(self._capacity, 1))
        self._stopping = threading.Event()
        self._closed = False
        self._close_lock = threading.Lock()
        self._threads = [
            threading.Thread(target=self._work, args=(n,), name=f"taskflow-worker-{n}", daemon=True)
            for n in range(1, workers + 1)
        ]
        for thread in self._threads:
            thread.start()
        if not test_mode:
            logger.info("TaskManager initialized", extra={"workers": workers})

    @classmethod
    def for_testing(cls, repo: TaskRepository, workers: int) -> TaskManager:
        """A manager whose tasks finish after a short fixed delay."""
        return cls(repo, workers, test_mode=True)

    def __enter__(self) -> TaskManager:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def create_task(self, task_id: str) -> Task:
        """Store a new pending task and queue it if a worker slot is free."""
        logger.info("Creating task %s", task_id)
        task = Task(task_id)
        try:
            self.repo.create(task)
        except TaskAlreadyExistsError as exc:
            logger.error("Failed to create task %s in repository: %s", task_id, exc)
            raise TaskAlreadyExistsError(f"failed to create task: {exc}") from exc
        except RepositoryError as exc:
            logger.error("Failed to create task %s in repository: %s", task_id, exc)
            raise RepositoryError(f"failed to create task: {exc}") from exc

        if self._capacity and not self._stopping.is_set():
            try:
                self._queue.put_nowait(task)
            except queue.Full:
                logger.warning("Worker pool full, task %s will be processed later", task_id)
            else:
                logger.info("Task %s queued for execution", task_id)
        else:
            logger.warning("Worker pool full, task %s will be processed later", task_id)

        logger.info("Task %s created successfully", task_id)
        return task

    def get_task(self, task_id: str) -> Task:
        """Return the stored task; raises TaskNotFoundError."""
        logger.debug("Getting task %s", task_id)
        try:
            return self.repo.get_by_id(task_id)
        except RepositoryError as exc:
            logger.warning("Task %s not found: %s", task_id, exc)
            raise

    def delete_task(self, task_id: str) -> None:
        """Delete a task that is not currently running."""
        logger.info("Deleting task %s", task_id)
        try:
            task = self.repo.get_by_id(task_id)
        except TaskNotFoundError as exc:
            logger.warning("Cannot delete task %s: not found", task_id)
            raise TaskNotFoundError(f"task not found: {exc}") from exc

        if task.is_running():
            logger.warning("Cannot delete running task %s", task_id)
            raise TaskRunningError()

        try:
            self.repo.delete(task_id)
        except RepositoryError as exc:
            logger.error("Failed to delete task %s from repository: %s", task_id, exc)
            raise
        logger.info("Task %s deleted successfully", task_id)

    def get_all_tasks(self) -> list[Task]:
        """Return every stored task."""
        logger.debug("Getting all tasks")
        try:
            tasks = self.repo.get_all()
        except RepositoryError as exc:
            logger.error("Failed to get all tasks: %s", exc)
            raise
        logger.debug("Retrieved %d tasks", len(tasks))
        return tasks

    def close(self) -> None:
        """Stop the workers and wait for them to exit."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        self._stopping.set()
        for _ in self._threads:
            self._queue.put(None)
        for thread in self._threads:
            thread.join()

    def _work(self, worker_id: int) -> None:
        logger.info("Worker %d started", worker_id)
        while True:
            task = self._queue.get()
            if task is None or self._stopping.is_set():
                break
            self._execute(task, worker_id)
        logger.info("Worker %d stopped", worker_id)

    def _duration(self) -> float:
        if self.test_mode:
            return _TEST_DURATION
        return float(random.randint(3, 5) * 60)

    def _execute(self, task: Task, worker_id: int) -> None:
        logger.info("Worker %d starting task %s", worker_id, task.id)
        task.status = TaskStatus.RUNNING
        task.started_at = datetime.now(timezone.utc)
        try:
            self.repo.update(task)
        except RepositoryError as exc:
            logger.error("Failed to update task %s status to running: %s", task.id, exc)
            return

        duration = self._duration()
        logger.info("Executing task %s for %.1fs", task.id, duration)
        if self._stopping.wait(duration):
            return

        task.status = TaskStatus.COMPLETED
        task.completed_at = datetime.now(timezone.utc)
        task.result = f"Task completed by worker {worker_id}"
        try:
            self.repo.update(task)
        except RepositoryError as exc:
            logger.error("Failed to update completed task %s: %s", task.id, exc)
            return
        logger.info("Task %s completed successfully", task.id)