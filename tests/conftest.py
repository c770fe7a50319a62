"""Root conftest — shared fixtures for bridge tests.

Invariants:
    - HOSTBRIDGE_* variables from the developer's shell never leak into tests
    - Listener tests bind 127.0.0.1:0 (ephemeral port) and never build a worker
    - fake_runner records every command and never spawns a process
"""

import os

import pytest

from hostbridge.config import Settings, get_settings
from hostbridge.core.errors import ExecutionError
from hostbridge.core.results import Ok
from hostbridge.infrastructure.process_runner import CommandResult
from hostbridge.services.handler_base import ResourceHandler, ToolHandler


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.upper().startswith("HOSTBRIDGE_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    return Settings(port=0, auto_build_worker=False, startup_timeout_seconds=10.0)


class RecordingTool(ToolHandler):
    """Spy tool: records every params dict it receives."""
    name = "record"
    description = "Records calls"
    required_params = ("target",)

    def __init__(self):
        self.calls = []

    def execute(self, params):
        self.calls.append(dict(params))
        return Ok(f"recorded {params['target']}", payload={"count": len(self.calls)})


class ExplodingTool(ToolHandler):
    name = "explode"
    description = "Raises an unexpected exception"

    def execute(self, params):
        raise RuntimeError("kaboom")


class FaultingTool(ToolHandler):
    name = "fault"
    description = "Raises a domain fault with its own kind"

    def execute(self, params):
        raise ExecutionError("Mesh has no faces", "mesh_error")


class StaticResource(ResourceHandler):
    name = "record"
    description = "Resource sharing a name with the record tool"

    def execute(self, params):
        return Ok("static", payload=[1, 2, 3])


@pytest.fixture
def recording_tool():
    return RecordingTool()


@pytest.fixture
def extra_handlers(recording_tool):
    return [recording_tool, ExplodingTool(), FaultingTool(), StaticResource()]


class FakeProcessRunner:
    """ProcessRunner stand-in: scripted exit codes, optional side effects."""

    def __init__(self):
        self.calls = []
        self.exit_codes = {}
        self.stderr = {}
        self.on_run = {}

    def run(self, command, cwd, timeout=None, env=None):
        key = " ".join(command)
        self.calls.append({"command": key, "cwd": str(cwd), "env": env})
        if key in self.on_run:
            self.on_run[key](cwd)
        code = self.exit_codes.get(key, 0)
        return CommandResult(tuple(command), code, stderr=self.stderr.get(key, ""))

    def commands(self):
        return [c["command"] for c in self.calls]


@pytest.fixture
def fake_runner():
    return FakeProcessRunner()
