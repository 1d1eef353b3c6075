"""WSGI application wiring and the server entry point."""

from __future__ import annotations

import json
import logging
import os
import re
import signal
import sys
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Callable

from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound
from werkzeug.routing import Map, Rule
from werkzeug.serving import make_server
from werkzeug.wrappers import Request, Response

from taskflow.handlers import TaskHandler
from taskflow.health import HealthHandler
from taskflow.repository import MemoryRepository
from taskflow.service import TaskManager

logger = logging.getLogger("taskflow")

DEFAULT_PORT = "8080"
DEFAULT_WORKERS = 3
DEFAULT_LOG_LEVEL = "info"

_ALLOWED_METHODS = frozenset({"GET", "POST", "DELETE", "OPTIONS"})
_ALLOWED_HEADERS = frozenset(
    {"content-type", "accept", "accept-language", "content-language", "origin"}
)
_LEVELS = {
    "panic": logging.CRITICAL,
    "fatal": logging.CRITICAL,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}
_INTEGER = re.compile(r"[+-]?\d+")


@dataclass(frozen=True)
class Config:
    """Server settings read from the environment."""

    port: str = DEFAULT_PORT
    workers: int = DEFAULT_WORKERS
    log_level: str = DEFAULT_LOG_LEVEL


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Read PORT, WORKERS and LOG_LEVEL; empty or unparsable values fall back to defaults."""
    env = os.environ if environ is None else environ
    port = env.get("PORT") or DEFAULT_PORT
    workers_text = env.get("WORKERS") or str(DEFAULT_WORKERS)
    log_level = env.get("LOG_LEVEL") or DEFAULT_LOG_LEVEL
    workers = int(workers_text) if _INTEGER.fullmatch(workers_text) else DEFAULT_WORKERS
    return Config(port=port, workers=workers, log_level=log_level)


def home(request: Request) -> Response:
    """GET / liveness message."""
    return Response("Taskflow API is running!", status=200, mimetype="text/plain")


class _TaskflowApp:
    """Routes requests to the task and health handlers, with permissive CORS."""

    def __init__(self, task_manager: TaskManager) -> None:
        self.task_manager = task_manager
        tasks = TaskHandler(task_manager)
        health = HealthHandler(task_manager)
        self.url_map = Map(
            [
                Rule("/", endpoint=home, methods=["GET"]),
                Rule("/health", endpoint=health.health, methods=["GET"]),
                Rule("/tasks", endpoint=tasks.create_task, methods=["POST"]),
                Rule("/tasks/<task_id>", endpoint=tasks.get_task, methods=["GET"]),
                Rule("/tasks/<task_id>", endpoint=tasks.delete_task, methods=["DELETE"]),
            ]
        )

    def __call__(
        self, environ: dict[str, Any], start_response: Callable[..., Any]
    ) -> Iterable[bytes]:
        response = self._handle(Request(environ))
        return response(environ, start_response)

    def _handle(self, request: Request) -> Response:
        if not request.headers.get("Origin"):
            return self._dispatch(request)
        requested_method = request.headers.get("Access-Control-Request-Method")
        if request.method == "OPTIONS" and requested_method:
            return self._preflight(request, requested_method)
        if request.method not in _ALLOWED_METHODS:
            return Response(status=405)
        response = self._dispatch(request)
        response.headers["Access-Control-Allow-Origin"] = "*"
        return response

    @staticmethod
    def _preflight(request: Request, requested_method: str) -> Response:
        method = requested_method.strip().upper()
        if method not in _ALLOWED_METHODS:
            return Response(status=405)
        raw_headers = request.headers.get("Access-Control-Request-Headers", "")
        requested_headers = [h.strip() for h in raw_headers.split(",") if h.strip()]
        if any(h.lower() not in _ALLOWED_HEADERS for h in requested_headers):
            return Response(status=403)
        response = Response(status=200)
        response.headers["Access-Control-Allow-Methods"] = method
        if requested_headers:
            response.headers["Access-Control-Allow-Headers"] = ",".join(requested_headers)
        response.headers["Access-Control-Allow-Origin"] = "*"
        return response

    def _dispatch(self, request: Request) -> Response:
        adapter = self.url_map.bind_to_environ(request.environ)
        try:
            endpoint, args = adapter.match()
        except NotFound:
            return Response("404 page not found\n", status=404, mimetype="text/plain")
        except MethodNotAllowed:
            return Response(status=405)
        except HTTPException as exc:
            return exc.get_response(request.environ)
        return endpoint(request, **args)


def create_app(task_manager: TaskManager) -> Callable[..., Iterable[bytes]]:
    """Build the WSGI application serving the task API."""
    return _TaskflowApp(task_manager)


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "level": record.levelname.lower(),
            "msg": record.getMessage(),
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
        }
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _configure_logging(level_name: str) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_JsonFormatter())
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(_LEVELS.get(level_name.strip().lower(), logging.INFO))


def _raise_interrupt(signum: int, frame: object) -> None:
    raise KeyboardInterrupt


def main(argv: Sequence[str] | None = None) -> int:
    """Run the HTTP server until SIGINT or SIGTERM."""
    config = load_config()
    _configure_logging(config.log_level)
    logger.info("Taskflow API starting...")

    try:
        port = int(config.port)
    except ValueError:
        logger.critical("Server failed to start: invalid port %r", config.port)
        return 1

    manager = TaskManager(MemoryRepository(), config.workers)
    try:
        try:
            server = make_server("0.0.0.0", port, create_app(manager), threaded=True)
        except OSError as exc:
            logger.critical("Server failed to start: %s", exc)
            return 1
        signal.signal(signal.SIGTERM, _raise_interrupt)
        logger.info("Server starting on port %s", config.port)
        server.serve_forever()
        logger.info("Shutting down server...")
    finally:
        manager.close()
    logger.info("Server exited")
    return 0


if __name__ == "__main__":
    sys.exit(main())