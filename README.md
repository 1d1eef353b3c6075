# taskflow

taskflow is a small HTTP API for submitting tasks and following them while a
pool of background worker threads runs them. Tasks are kept in memory: each
one starts as `pending`, becomes `running` when a worker takes it, and ends as
`completed`.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Running the server

```
taskflow
```

The server listens on all interfaces and reads its settings from the
environment. Empty variables count as unset.

| Variable    | Default | Meaning                                                           |
|-------------|---------|-------------------------------------------------------------------|
| `PORT`      | `8080`  | TCP port to listen on                                             |
| `WORKERS`   | `3`     | Number of background worker threads                               |
| `LOG_LEVEL` | `info`  | `panic`, `fatal`, `error`, `warn`, `warning`, `info`, `debug`, `trace` |

If `WORKERS` is not an integer, 3 is used; a negative number is refused when
the task manager starts. An unknown `LOG_LEVEL` falls back to `info`. Log
records are written to standard error as one JSON object per line. If `PORT`
is not a number or the port cannot be bound, the command logs the reason and
exits with status 1.

Stop the server with Ctrl+C or SIGTERM; the workers are then stopped and the
command exits with status 0.

## Endpoints

| Method   | Path          | Result                                                  |
|----------|---------------|---------------------------------------------------------|
| `GET`    | `/`           | `200`, plain text `Taskflow API is running!`            |
| `GET`    | `/health`     | `200` if healthy, `503` if not, with metrics            |
| `POST`   | `/tasks`      | Body `{"id": "..."}`; `201` with the new task           |
| `GET`    | `/tasks/<id>` | `200` with the task, `404` if unknown                   |
| `DELETE` | `/tasks/<id>` | `204`; `404` if unknown, `409` if the task is running   |

Errors come back as JSON of the form `{"error": "message"}`:

- a body that is not a JSON object, or whose `id` is not a string: `400`,
  `Invalid JSON`;
- a missing or empty `id`: `400`, `Task ID is required`;
- an `id` that is already taken: `409`, with a message saying the task
  already exists;
- an unknown id: `404`, `Task not found`;
- deleting a running task: `409`, `Cannot delete running task`.

Requests that carry an `Origin` header get `Access-Control-Allow-Origin: *`.
Preflight requests are answered for the methods `GET`, `POST`, `DELETE` and
`OPTIONS` and for simple headers such as `Content-Type`.

A task looks like this:

```json
{
  "id": "report-42",
  "status": "completed",
  "created_at": "2024-01-01T12:00:00.000000+00:00",
  "started_at": "2024-01-01T12:00:01.000000+00:00",
  "completed_at": "2024-01-01T12:04:01.000000+00:00",
  "result": "Task completed by worker 1"
}
```

`started_at`, `completed_at`, `result` and `error` are left out until they
have a value. Each task stands in for an I/O-bound job and takes three to five
minutes.

The health response holds `status`, `timestamp`, `uptime` (written like
`1h2m3.5s`), `service` (`Taskflow API`), `version` (`1.0.0`), `metrics`
(`active_workers`, `total_tasks`, `pending_tasks`, `running_tasks`,
`completed_tasks`, `failed_tasks`) and `checks` (`workers`, `memory`,
`storage`). With no workers the `workers` check reads `no_workers` and the
status is `unhealthy`.

## Using it as a library

```python
from taskflow.app import create_app
from taskflow.repository import MemoryRepository
from taskflow.service import TaskManager

with TaskManager(MemoryRepository(), workers=2) as manager:
    app = create_app(manager)      # a WSGI application
    task = manager.create_task("report-42")
    print(manager.get_task("report-42").status)
```

- `taskflow.model`: `Task` and `TaskStatus`.
- `taskflow.repository`: `MemoryRepository`, a thread-safe store behind the
  `TaskRepository` interface; it raises `TaskAlreadyExistsError` and
  `TaskNotFoundError`, both `RepositoryError`.
- `taskflow.service`: `TaskManager` with `create_task`, `get_task`,
  `delete_task`, `get_all_tasks` and `close`; deleting a running task raises
  `TaskRunningError`. `TaskManager.for_testing(repo, workers)` gives a manager
  whose tasks finish after 100 ms.
- `taskflow.handlers` and `taskflow.health`: the request handlers
  `TaskHandler` and `HealthHandler`, and `format_duration`.
- `taskflow.app`: `create_app`, `load_config`, `Config` and `main`.

## What it does not do

- Nothing is persisted: all tasks are lost when the process stops.
- There is no endpoint that lists tasks.
- The work queue holds twice as many tasks as there are workers. A task
  created while the queue is full, or while there are no workers, is stored
  but stays `pending`; nothing picks it up later.
- Tasks never end as `failed`; that state exists but no code sets it.
- On shutdown, tasks that are running are abandoned rather than finished.