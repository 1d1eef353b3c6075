"""Health check endpoint reporting task metrics and service checks."""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

from werkzeug.wrappers import Request, Response

from taskflow.handlers import json_response
from taskflow.model import TaskStatus
from taskflow.repository import RepositoryError
from taskflow.service import TaskManager

logger = logging.getLogger(__name__)

SERVICE_NAME = "Taskflow API"
SERVICE_VERSION = "1.0.0"

_NS_PER_US = 1_000
_NS_PER_MS = 1_000_000
_NS_PER_S = 1_000_000_000
_NS_PER_MIN = 60 * _NS_PER_S
_NS_PER_HOUR = 60 * _NS_PER_MIN


def _fixed(value: int, unit: int, digits: int) -> str:
    whole, frac = divmod(value, unit)
    if not frac:
        return str(whole)
    return f"{whole}.{frac:0{digits}d}".rstrip("0")


def format_duration(seconds: float) -> str:
    """Render a duration like "1h2m3.5s", "250ms" or "0s"."""
    ns = round(seconds * _NS_PER_S)
    sign = "-" if ns < 0 else ""
    ns = abs(ns)
    if ns == 0:
        return "0s"
    if ns < _NS_PER_US:
        return f"{sign}{ns}ns"
    if ns < _NS_PER_MS:
        return f"{sign}{_fixed(ns, _NS_PER_US, 3)}µs"
    if ns < _NS_PER_S:
        return f"{sign}{_fixed(ns, _NS_PER_MS, 6)}ms"
    hours, rest = divmod(ns, _NS_PER_HOUR)
    minutes, rest = divmod(rest, _NS_PER_MIN)
    secs = _fixed(rest, _NS_PER_S, 9)
    if hours:
        return f"{sign}{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{sign}{minutes}m{secs}s"
    return f"{sign}{secs}s"


@dataclass
class HealthMetrics:
    """Worker and task counts reported by the health check."""

    active_workers: int = 0
    total_tasks: int = 0
    pending_tasks: int = 0
    running_tasks: int = 0
    completed_tasks: int = 0
    failed_tasks: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


class HealthHandler:
    """Serves GET /health."""

    def __init__(self, task_manager: TaskManager) -> None:
        self.task_manager = task_manager
        self._started = time.monotonic()

    def health(self, request: Request) -> Response:
        """Report status, uptime, metrics and checks; 503 if any check fails."""
        logger.debug("Processing health check request")
        uptime = format_duration(time.monotonic() - self._started)
        metrics = self._collect_metrics()
        checks = self._perform_checks()
        status = "healthy" if all(value == "ok" for value in checks.values()) else "unhealthy"

        payload = {
            "status": status,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": uptime,
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "metrics": metrics.to_dict(),
            "checks": checks,
        }
        logger.info(
            "Health check completed: status=%s uptime=%s total_tasks=%d running_tasks=%d",
            status,
            uptime,
            metrics.total_tasks,
            metrics.running_tasks,
        )
        return json_response(payload, 200 if status == "healthy" else 503)

    def _collect_metrics(self) -> HealthMetrics:
        workers = self.task_manager.workers
        try:
            tasks = self.task_manager.get_all_tasks()
        except RepositoryError as exc:
            logger.warning("Failed to collect task metrics: %s", exc)
            return HealthMetrics(active_workers=workers)

        counts = {status: 0 for status in TaskStatus}
        for task in tasks:
            counts[task.status] += 1
        return HealthMetrics(
            active_workers=workers,
            total_tasks=len(tasks),
            pending_tasks=counts[TaskStatus.PENDING],
            running_tasks=counts[TaskStatus.RUNNING],
            completed_tasks=counts[TaskStatus.COMPLETED],
            failed_tasks=counts[TaskStatus.FAILED],
        )

    def _perform_checks(self) -> dict[str, str]:
        checks = {
            "workers": "ok" if self.task_manager.workers else "no_workers",
            "memory": "ok",
            "storage": "ok",
        }
        try:
            self.task_manager.get_all_tasks()
        except RepositoryError:
            checks["storage"] = "error"
        return checks