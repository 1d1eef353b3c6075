"""Task records and their lifecycle states."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class TaskStatus(str, Enum):
    """Lifecycle state of a task."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Task:
    """A unit of work tracked by the service."""

    id: str
    status: TaskStatus = TaskStatus.PENDING
    created_at: datetime = field(default_factory=_now)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    result: str = ""
    error: str = ""

    def __post_init__(self) -> None:
        self.status = TaskStatus(self.status)

    def is_completed(self) -> bool:
        """True once the task has finished, successfully or not."""
        return self.status in (TaskStatus.COMPLETED, TaskStatus.FAILED)

    def is_running(self) -> bool:
        """True while a worker is executing the task."""
        return self.status is TaskStatus.RUNNING

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping; unset optional fields are left out."""
        data: dict[str, Any] = {
            "id": self.id,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }
        if self.started_at is not None:
            data["started_at"] = self.started_at.isoformat()
        if self.completed_at is not None:
            data["completed_at"] = self.completed_at.isoformat()
        if self.result:
            data["result"] = self.result
        if self.error:
            data["error"] = self.error
        return data