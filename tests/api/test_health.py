"""Health Routes — tests for the HTTP introspection endpoints.

Tests cover:
    - GET /health reports listener state and operation count
    - GET /health/operations/{name} describes a registered operation
    - Unknown names map to a 404 with errorKind unknown_operation
"""

import pytest
from fastapi.testclient import TestClient

from hostbridge.context import BridgeContext
from hostbridge.main import create_app


@pytest.fixture
def client(settings):
    return TestClient(create_app(BridgeContext(settings)))


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["listener"] == "stopped"
    assert body["operations"] == 4


def test_describe_operation(client):
    response = client.get("/health/operations/echo")
    assert response.status_code == 200
    assert response.json() == {
        "name": "echo",
        "kind": "tool",
        "description": "Returns the given message unchanged",
        "synchronous": True,
        "requiredParams": ["message"],
        "available": True,
    }


def test_describe_unknown_operation(client):
    response = client.get("/health/operations/missing_op")
    assert response.status_code == 404
    error = response.json()["error"]
    assert error["errorKind"] == "unknown_operation"
    assert error["message"] == "Unknown operation: missing_op"
