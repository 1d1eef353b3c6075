"""HTTP handlers for creating, reading and deleting tasks."""

from __future__ import annotations

import json
import logging
from typing import Any

from werkzeug.wrappers import Request, Response

from taskflow.repository import RepositoryError, TaskAlreadyExistsError, TaskNotFoundError
from taskflow.service import TaskManager, TaskRunningError

logger = logging.getLogger(__name__)

_DECODER = json.JSONDecoder()


class _InvalidJSON(ValueError):
    """The request body is not a usable JSON object."""


def json_response(payload: Any, status: int) -> Response:
    """A JSON response with a trailing newline, as a streaming encoder writes it."""
    return Response(json.dumps(payload) + "\n", status=status, mimetype="application/json")


def error_response(message: str, status: int) -> Response:
    """A JSON error body of the form {"error": message}."""
    logger.warning("Sending error response: %s (status %d)", message, status)
    return json_response({"error": message}, status)


def _read_task_id(request: Request) -> str:
    text = request.get_data(as_text=True).lstrip()
    try:
        payload, _ = _DECODER.raw_decode(text)
    except json.JSONDecodeError as exc:
        raise _InvalidJSON(str(exc)) from exc
    if payload is None:
        return ""
    if not isinstance(payload, dict):
        raise _InvalidJSON("request body must be a JSON object")
    task_id = payload.get("id")
    if task_id is None:
        return ""
    if not isinstance(task_id, str):
        raise _InvalidJSON("field 'id' must be a string")
    return task_id


class TaskHandler:
    """Request handlers for the /tasks endpoints."""

    def __init__(self, task_manager: TaskManager) -> None:
        self.task_manager = task_manager

    def create_task(self, request: Request) -> Response:
        """POST /tasks with a body of {"id": "..."}."""
        try:
            task_id = _read_task_id(request)
        except _InvalidJSON as exc:
            logger.warning("Invalid JSON in create task request: %s", exc)
            return error_response("Invalid JSON", 400)

        if not task_id:
            logger.warning("Empty task ID in create request")
            return error_response("Task ID is required", 400)

        try:
            task = self.task_manager.create_task(task_id)
        except TaskAlreadyExistsError as exc:
            return error_response(str(exc), 409)
        except RepositoryError:
            return error_response("Failed to create task", 500)

        return json_response(task.to_dict(), 201)

    def get_task(self, request: Request, task_id: str) -> Response:
        """GET /tasks/<task_id>."""
        if not task_id:
            logger.warning("Empty task ID in get request")
            return error_response("Task ID is required", 400)

        try:
            task = self.task_manager.get_task(task_id)
        except TaskNotFoundError:
            return error_response("Task not found", 404)
        except RepositoryError:
            return error_response("Failed to get task", 500)

        return json_response(task.to_dict(), 200)

    def delete_task(self, request: Request, task_id: str) -> Response:
        """DELETE /tasks/<task_id>; running tasks cannot be deleted."""
        if not task_id:
            logger.warning("Empty task ID in delete request")
            return error_response("Task ID is required", 400)

        try:
            self.task_manager.delete_task(task_id)
        except TaskNotFoundError:
            return error_response("Task not found", 404)
        except TaskRunningError:
            return error_response("Cannot delete running task", 409)
        except RepositoryError:
            return error_response("Failed to delete task", 500)

        return Response(status=204)