"""Health Routes — liveness and registry introspection over plain HTTP.

Invariants:
    - GET /health always returns 200 while the process serves HTTP
    - GET /health/operations/{name} returns 404 (unknown_operation) for unregistered names
"""

import logging

from fastapi import APIRouter, Request, status

from hostbridge import __version__
from hostbridge.core.errors import UnknownOperationError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


@router.get("", status_code=status.HTTP_200_OK)
async def health_check(request: Request):
    """Liveness probe plus listener state."""
    context = request.app.state.context
    return {
        "status": "healthy",
        "service": "hostbridge",
        "version": __version__,
        "listener": context.listener.state.value,
        "operations": len(context.registry),
    }


@router.get("/operations/{name}")
async def describe_operation(name: str, request: Request):
    entry = request.app.state.context.registry.lookup(name)
    if entry is None:
        raise UnknownOperationError(name)
    descriptor, _ = entry
    return descriptor.to_dict()
