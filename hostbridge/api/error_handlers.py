"""Error Handlers — HTTP mapping of bridge errors for the health routes.

Invariants:
    - BridgeError -> its own http_status with the to_http_response() body
    - Any other exception -> 500 internal_error; the exception text is logged, never returned
    - WebSocket frames never reach these handlers (the dispatcher answers every frame itself)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from hostbridge.core.domain_types import ErrorKind
from hostbridge.core.errors import BridgeError, ErrorCategory, ErrorContext, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Install the BridgeError handler and the catch-all on the app."""
    app.add_exception_handler(BridgeError, _bridge_error_response)
    app.add_exception_handler(Exception, _unexpected_error_response)


async def _bridge_error_response(request: Request, exc: BridgeError) -> JSONResponse:
    logger.warning(
        f"{request.method} {request.url.path} -> {exc.error_kind}: {exc.message}",
        extra={"error_kind": exc.error_kind, "operation": exc.context.operation},
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_http_response())


async def _unexpected_error_response(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}",
        exc_info=True,
        extra={"error_kind": ErrorKind.INTERNAL.value},
    )
    internal = BridgeError(
        "An unexpected error occurred",
        ErrorKind.INTERNAL.value,
        ErrorCategory.INTERNAL,
        ErrorSeverity.CRITICAL,
        ErrorContext(debug_info={"path": request.url.path}),
    )
    return JSONResponse(status_code=internal.http_status, content=internal.to_http_response())
