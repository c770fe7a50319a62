"""Built-in Handlers — tests for the operations the bridge answers itself.

Tests cover:
    - send_log_message logs at the requested level
    - list_operations describes the registry and validates its kind filter
    - get_bridge_status reports a stopped listener before start()
"""

import logging

import pytest

from hostbridge.context import BridgeContext


@pytest.fixture
def context(settings):
    return BridgeContext(settings)


@pytest.mark.asyncio
async def test_send_log_message_logs_at_level(context, caplog):
    with caplog.at_level(logging.INFO, logger="hostbridge.remote"):
        response = await context.dispatcher.handle({
            "operation": "send_log_message",
            "params": {"message": "Scene saved", "type": "WARNING"},
        })
    assert response.message == "Message displayed: Scene saved"
    record = next(r for r in caplog.records if r.name == "hostbridge.remote")
    assert record.levelno == logging.WARNING
    assert record.getMessage() == "Scene saved"


@pytest.mark.asyncio
async def test_list_operations_describes_registry(context):
    response = await context.dispatcher.handle({"operation": "list_operations"})
    names = {entry["name"]: entry for entry in response.payload}
    assert set(names) == {"echo", "send_log_message", "list_operations", "get_bridge_status"}
    assert names["echo"]["requiredParams"] == ["message"]
    assert names["get_bridge_status"]["synchronous"] is False


@pytest.mark.asyncio
async def test_list_operations_filters_by_kind(context):
    response = await context.dispatcher.handle(
        {"operation": "list_operations", "params": {"kind": "resource"}},
    )
    assert {entry["kind"] for entry in response.payload} == {"resource"}

    bad = await context.dispatcher.handle(
        {"operation": "list_operations", "params": {"kind": "widget"}},
    )
    assert bad.error_kind == "validation_error"


@pytest.mark.asyncio
async def test_bridge_status_before_start(context):
    response = await context.dispatcher.handle({"operation": "get_bridge_status"})
    assert response.success
    assert response.payload["state"] == "stopped"
    assert response.payload["url"] is None
    assert response.payload["requestTimeoutSeconds"] == 10
