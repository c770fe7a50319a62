"""Bridge Socket — the WebSocket endpoint remote callers talk to.

Invariants:
    - One response frame per request frame, sent only after the dispatcher returns
    - Text and binary frames are both accepted; responses are always text
    - A handler fault never closes the socket; only the client or stop() does
    - Every connection is registered with the listener for its lifetime
"""

import logging
from uuid import uuid4

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect

from hostbridge.core.domain_types import ConnectionId

logger = logging.getLogger(__name__)


async def bridge_socket(websocket: WebSocket):
    """Receive envelopes, dispatch each, reply in order."""
    context = websocket.app.state.context
    connection_id = ConnectionId(uuid4().hex)
    peer = f"{websocket.client.host}:{websocket.client.port}" if websocket.client else "unknown"

    await websocket.accept()
    context.listener.register_client(connection_id, peer)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes") or b""
            response = await context.dispatcher.handle_frame(raw, connection_id)
            await websocket.send_text(response.to_json())
    except WebSocketDisconnect:
        pass
    finally:
        context.listener.unregister_client(connection_id)
