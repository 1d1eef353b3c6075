import pytest
from werkzeug.test import Client, EnvironBuilder

from taskflow.app import Config, create_app, home, load_config
from taskflow.repository import MemoryRepository
from taskflow.service import TaskManager

ORIGIN = "http://app.example.com"


@pytest.fixture
def manager():
    mgr = TaskManager.for_testing(MemoryRepository(), 0)
    yield mgr
    mgr.close()


@pytest.fixture
def client(manager):
    return Client(create_app(manager))


def test_load_config_defaults():
    assert load_config({}) == Config(port="8080", workers=3, log_level="info")


def test_load_config_reads_environment():
    config = load_config({"PORT": "9000", "WORKERS": "5", "LOG_LEVEL": "debug"})
    assert config == Config(port="9000", workers=5, log_level="debug")


def test_load_config_empty_values_use_defaults():
    assert load_config({"PORT": "", "WORKERS": "", "LOG_LEVEL": ""}) == load_config({})


def test_load_config_invalid_workers_falls_back():
    assert load_config({"WORKERS": "many"}).workers == 3


def test_home():
    response = home(EnvironBuilder(method="GET", path="/").get_request())
    assert response.status_code == 200
    assert response.get_data(as_text=True) == "Taskflow API is running!"


def test_app_home_route(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.get_data(as_text=True) == "Taskflow API is running!"


def test_app_task_lifecycle(client):
    created = client.post("/tasks", json={"id": "life"})
    assert created.status_code == 201
    assert created.json["id"] == "life"

    fetched = client.get("/tasks/life")
    assert fetched.status_code == 200
    assert fetched.json["id"] == created.json["id"]

    deleted = client.delete("/tasks/life")
    assert deleted.status_code == 204

    missing = client.get("/tasks/life")
    assert missing.status_code == 404
    assert missing.json == {"error": "Task not found"}


def test_app_health_route():
    mgr = TaskManager.for_testing(MemoryRepository(), 2)
    try:
        response = Client(create_app(mgr)).get("/health")
    finally:
        mgr.close()
    assert response.status_code == 200
    assert response.json["status"] == "healthy"


def test_app_unknown_path(client):
    assert client.get("/nowhere").status_code == 404


def test_app_wrong_method(client):
    assert client.put("/tasks/x").status_code == 405


def test_cors_origin_header_added(client):
    response = client.get("/", headers={"Origin": ORIGIN})
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_no_cors_header_without_origin(client):
    response = client.get("/")
    assert "Access-Control-Allow-Origin" not in response.headers


def test_cors_preflight(client):
    response = client.options(
        "/tasks",
        headers={
            "Origin": ORIGIN,
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert response.status_code == 200
    assert response.headers["Access-Control-Allow-Methods"] == "POST"
    assert response.headers["Access-Control-Allow-Headers"] == "Content-Type"
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_cors_preflight_rejects_method(client):
    response = client.options(
        "/tasks",
        headers={"Origin": ORIGIN, "Access-Control-Request-Method": "PUT"},
    )
    assert response.status_code == 405


def test_cors_preflight_rejects_header(client):
    response = client.options(
        "/tasks",
        headers={
            "Origin": ORIGIN,
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "X-Custom",
        },
    )
    assert response.status_code == 403