[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "taskflow"
version = "1.0.0"
description = "A small HTTP API that accepts tasks and runs them on a pool of background workers"
requires-python = ">=3.10"
keywords = ["tasks", "worker-pool", "http", "api", "wsgi"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "werkzeug",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
taskflow = "taskflow.app:main"

[tool.hatch.build.targets.wheel]
packages = ["taskflow"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
