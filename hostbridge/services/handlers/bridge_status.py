"""Bridge Status resource — listener state and connection details.

Runs on the event loop (synchronous = False): it only reads in-memory state.
"""

from typing import Any

from hostbridge import __version__
from hostbridge.core.results import Ok
from hostbridge.services.handler_base import ResourceHandler


class BridgeStatusResource(ResourceHandler):
    name = "get_bridge_status"
    description = "Reports listener state, address, connected clients, and request timeout"
    synchronous = False

    def __init__(self, context):
        self._context = context

    async def execute(self, params: dict[str, Any]) -> Ok:
        listener = self._context.listener
        settings = self._context.settings
        return Ok(
            f"Bridge is {listener.state.value}",
            payload={
                "state": listener.state.value,
                "url": listener.url,
                "port": listener.port or settings.port,
                "endpointPath": settings.endpoint_path,
                "clients": len(listener.clients),
                "requestTimeoutSeconds": settings.request_timeout_seconds,
                "version": __version__,
            },
        )
