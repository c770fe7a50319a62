"""hostbridge App — FastAPI application factory.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - The WebSocket endpoint path comes from settings.endpoint_path
    - app.state.context is the only way routes reach the registry, dispatcher, and listener
"""

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI

from hostbridge import __version__
from hostbridge.api.error_handlers import register_error_handlers
from hostbridge.api.routes import health
from hostbridge.api.routes.bridge_socket import bridge_socket

if TYPE_CHECKING:
    from hostbridge.context import BridgeContext

logger = logging.getLogger(__name__)


def create_app(context: "BridgeContext") -> FastAPI:
    """Build the ASGI app served by the bridge listener."""
    app = FastAPI(title="hostbridge", version=__version__)
    app.state.context = context

    register_error_handlers(app)

    app.include_router(health.router)
    app.add_api_websocket_route(context.settings.endpoint_path, bridge_socket)
    return app
