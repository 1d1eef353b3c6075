import pytest

from taskflow.model import Task, TaskStatus
from taskflow.repository import (
    MemoryRepository,
    RepositoryError,
    TaskAlreadyExistsError,
    TaskNotFoundError,
)


@pytest.fixture
def repo():
    return MemoryRepository()


def test_create(repo):
    repo.create(Task("test-1"))
    saved = repo.get_by_id("test-1")
    assert saved.id == "test-1"
    assert saved.status is TaskStatus.PENDING


def test_create_duplicate(repo):
    task = Task("test-1")
    repo.create(task)
    with pytest.raises(TaskAlreadyExistsError, match="already exists"):
        repo.create(task)


def test_create_none(repo):
    with pytest.raises(ValueError):
        repo.create(None)


def test_get_by_id_not_found(repo):
    with pytest.raises(TaskNotFoundError, match="not found"):
        repo.get_by_id("non-existent")


def test_errors_share_base_class(repo):
    with pytest.raises(RepositoryError):
        repo.get_by_id("non-existent")


def test_update(repo):
    task = Task("test-1")
    repo.create(task)
    task.status = TaskStatus.RUNNING
    repo.update(task)
    assert repo.get_by_id("test-1").status is TaskStatus.RUNNING


def test_update_missing(repo):
    with pytest.raises(TaskNotFoundError):
        repo.update(Task("ghost"))


def test_delete(repo):
    repo.create(Task("test-1"))
    repo.delete("test-1")
    with pytest.raises(TaskNotFoundError):
        repo.get_by_id("test-1")


def test_delete_missing(repo):
    with pytest.raises(TaskNotFoundError):
        repo.delete("test-1")


def test_get_all(repo):
    repo.create(Task("test-1"))
    repo.create(Task("test-2"))
    tasks = repo.get_all()
    assert len(tasks) == 2
    assert {t.id for t in tasks} == {"test-1", "test-2"}


def test_get_all_returns_copy(repo):
    repo.create(Task("test-1"))
    repo.get_all().clear()
    assert len(repo.get_all()) == 1