import time

import pytest

from taskflow.model import TaskStatus
from taskflow.repository import MemoryRepository, TaskAlreadyExistsError, TaskNotFoundError
from taskflow.service import TaskManager, TaskRunningError


@pytest.fixture
def make_manager():
    managers = []

    def factory(workers):
        manager = TaskManager.for_testing(MemoryRepository(), workers)
        managers.append(manager)
        return manager

    yield factory
    for manager in managers:
        manager.close()


def _wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_create_task(make_manager):
    manager = make_manager(2)
    task = manager.create_task("test-1")
    assert task.id == "test-1"
    saved = manager.get_task("test-1")
    assert saved.id == "test-1"


def test_create_task_is_pending_without_workers(make_manager):
    manager = make_manager(0)
    task = manager.create_task("test-1")
    assert task.status is TaskStatus.PENDING
    assert manager.get_task("test-1").status is TaskStatus.PENDING


def test_create_task_duplicate(make_manager):
    manager = make_manager(2)
    manager.create_task("test-1")
    with pytest.raises(TaskAlreadyExistsError, match="already exists"):
        manager.create_task("test-1")


def test_delete_task(make_manager):
    manager = make_manager(0)
    manager.create_task("test-1")
    manager.delete_task("test-1")
    with pytest.raises(TaskNotFoundError):
        manager.get_task("test-1")


def test_delete_task_not_found(make_manager):
    manager = make_manager(2)
    with pytest.raises(TaskNotFoundError, match="not found"):
        manager.delete_task("non-existent")


def test_delete_running_task(make_manager):
    manager = make_manager(0)
    task = manager.create_task("busy")
    task.status = TaskStatus.RUNNING
    with pytest.raises(TaskRunningError, match="cannot delete running task"):
        manager.delete_task("busy")
    assert manager.get_task("busy").id == "busy"


def test_task_execution(make_manager):
    manager = make_manager(1)
    manager.create_task("test-execution")
    assert _wait_for(lambda: manager.get_task("test-execution").is_completed())
    updated = manager.get_task("test-execution")
    assert updated.status is TaskStatus.COMPLETED
    assert "completed by worker" in updated.result
    assert updated.started_at is not None and updated.completed_at is not None
    assert updated.started_at <= updated.completed_at


def test_get_all_tasks(make_manager):
    manager = make_manager(0)
    manager.create_task("a")
    manager.create_task("b")
    assert sorted(t.id for t in manager.get_all_tasks()) == ["a", "b"]


def test_worker_count(make_manager):
    assert make_manager(3).workers == 3


def test_negative_workers_rejected():
    with pytest.raises(ValueError):
        TaskManager.for_testing(MemoryRepository(), -1)


def test_close_stops_workers():
    manager = TaskManager.for_testing(MemoryRepository(), 2)
    manager.close()
    manager.close()
    assert all(not t.is_alive() for t in manager._threads)


def test_context_manager_closes():
    with TaskManager.for_testing(MemoryRepository(), 1) as manager:
        manager.create_task("x")
    assert all(not t.is_alive() for t in manager._threads)