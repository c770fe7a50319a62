"""Request Dispatch — routes one request envelope to one handler, returns one response envelope.

Invariants:
    - handle() and handle_frame() never raise: every outcome is a ResponseEnvelope
    - Unknown operations return unknown_operation ("Unknown operation: <name>")
    - A missing required parameter returns validation_error and the handler is not invoked
    - BridgeError from a handler becomes a failure envelope with the error's kind
    - Any other exception becomes internal_error; the connection and listener keep running
    - No state survives between requests (the registry is read-only)

Design Decisions:
    - Synchronous handlers run in the threadpool: a slow handler blocks only its own connection
    - Handlers return Ok / Err; the except clauses remain as the last-resort net
"""

import inspect
import logging
from typing import Any

from starlette.concurrency import run_in_threadpool

from hostbridge.core.domain_types import ErrorKind
from hostbridge.core.errors import (
    BridgeError, ErrorContext, ParameterValidationError, UnknownOperationError,
)
from hostbridge.core.results import Err, Ok
from hostbridge.schemas.envelope import (
    RequestEnvelope, ResponseEnvelope, decode_frame, extract_request_id, parse_request,
)
from hostbridge.services.registry import Registry

logger = logging.getLogger(__name__)

# Envelope fields a handler's Ok.extra may not overwrite
_RESERVED_FIELDS = frozenset({"success", "type", "message", "payload", "errorKind", "error_kind"})


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class Dispatcher:
    """Parses, validates, invokes, and wraps. One instance shared by all connections."""

    def __init__(self, registry: Registry):
        self._registry = registry.freeze()

    @property
    def registry(self) -> Registry:
        return self._registry

    async def handle_frame(self, raw: str | bytes, connection_id: str | None = None) -> ResponseEnvelope:
        """Entry point for a raw WebSocket text frame."""
        try:
            data = decode_frame(raw)
        except ParameterValidationError as e:
            logger.warning(f"Rejected frame: {e.message}", extra={"connection_id": connection_id})
            return e.to_response()
        response = await self.handle(data, connection_id=connection_id)
        return response.with_request_id(extract_request_id(data))

    async def handle(
        self, envelope: RequestEnvelope | dict, connection_id: str | None = None,
    ) -> ResponseEnvelope:
        try:
            return await self._dispatch(envelope, connection_id)
        except Exception as e:
            # envelope construction itself failed (e.g. unserializable handler output)
            logger.error(f"Dispatcher fault: {e}", exc_info=True, extra={"connection_id": connection_id})
            return ResponseEnvelope.error(ErrorKind.INTERNAL.value, "Internal error while handling request")

    async def _dispatch(
        self, envelope: RequestEnvelope | dict, connection_id: str | None,
    ) -> ResponseEnvelope:
        if not isinstance(envelope, RequestEnvelope):
            try:
                envelope = parse_request(envelope)
            except ParameterValidationError as e:
                logger.warning(f"Rejected request: {e.message}", extra={"connection_id": connection_id})
                return e.to_response()

        name = envelope.operation
        context = ErrorContext(operation=name, connection_id=connection_id)
        entry = self._registry.lookup(name)
        if entry is None:
            err = UnknownOperationError(name, context)
            logger.warning(err.message, extra={"operation": name, "error_kind": err.error_kind})
            return err.to_response()
        descriptor, handler = entry

        for param in descriptor.required_params:
            if _is_missing(envelope.params.get(param)):
                err = ParameterValidationError.missing(param, context)
                logger.warning(err.message, extra={"operation": name, "error_kind": err.error_kind})
                return err.to_response()

        logger.info(f"Executing {descriptor.kind.value}: {name}", extra={
            "operation": name, "connection_id": connection_id,
        })
        try:
            if descriptor.synchronous:
                result = await run_in_threadpool(handler.execute, envelope.params)
            else:
                result = handler.execute(envelope.params)
            if inspect.isawaitable(result):
                result = await result
        except BridgeError as e:
            logger.warning(
                f"Operation '{name}' failed: {e.message}",
                extra={"operation": name, "error_kind": e.error_kind},
            )
            return e.to_response()
        except Exception as e:
            logger.error(
                f"Unhandled exception in '{name}': {e}",
                exc_info=True,
                extra={"operation": name, "error_kind": ErrorKind.INTERNAL.value},
            )
            return ResponseEnvelope.error(
                ErrorKind.INTERNAL.value,
                f"Operation '{name}' failed unexpectedly ({type(e).__name__})",
            )
        return self._wrap(name, result)

    def _wrap(self, name: str, result: Any) -> ResponseEnvelope:
        if isinstance(result, Ok):
            extra = {k: v for k, v in result.extra.items() if k not in _RESERVED_FIELDS}
            return ResponseEnvelope.ok(result.message, result.payload, **extra)
        if isinstance(result, Err):
            logger.warning(
                f"Operation '{name}' reported {result.error_kind}: {result.message}",
                extra={"operation": name, "error_kind": result.error_kind},
            )
            return ResponseEnvelope.error(result.error_kind, result.message)
        if isinstance(result, ResponseEnvelope):
            return result
        logger.error(
            f"Operation '{name}' returned unsupported result type {type(result).__name__}",
            extra={"operation": name, "error_kind": ErrorKind.INTERNAL.value},
        )
        return ResponseEnvelope.error(
            ErrorKind.INTERNAL.value, f"Operation '{name}' returned an invalid result",
        )
