"""Error Hierarchy — typed, categorized exceptions for all bridge failure modes.

Invariants:
    - Every error has an error_kind (wire errorKind), category, and severity
    - Request-level errors are recoverable and become failure envelopes at the dispatcher
    - Lifecycle errors (orchestration, bind) abort start() and are never sent over the wire
    - Registration errors are fatal: they surface while the registry is being built

Design Decisions:
    - Single hierarchy with BridgeError base: dispatcher and HTTP handlers catch one type
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from hostbridge.core.domain_types import ErrorKind, HandlerKind


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DEPENDENCY = "dependency"
    EXECUTION = "execution"
    LIFECYCLE = "lifecycle"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    connection_id: str | None = None
    worker_path: str | None = None
    debug_info: dict[str, Any] | None = None


class BridgeError(Exception):
    """Base exception for all bridge errors."""

    def __init__(
        self,
        message: str,
        error_kind: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.error_kind = error_kind
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self):
        """Convert to a failure ResponseEnvelope."""
        from hostbridge.schemas.envelope import ResponseEnvelope
        return ResponseEnvelope.error(self.error_kind, self.message)

    def to_http_response(self) -> dict:
        """Convert to the REST error body used by the HTTP routes."""
        return {
            "error": {
                "errorKind": self.error_kind,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "operation": self.context.operation,
                    "connection_id": self.context.connection_id,
                },
            }
        }


# ─── Request Errors (normalized by the dispatcher) ──────────────

class ParameterValidationError(BridgeError):
    """Request envelope or handler parameter is malformed or missing."""
    def __init__(self, message: str, field: str | None = None, context: ErrorContext | None = None):
        super().__init__(
            message, ErrorKind.VALIDATION.value, ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field

    @classmethod
    def missing(cls, param: str, context: ErrorContext | None = None) -> "ParameterValidationError":
        return cls(f"Required parameter '{param}' not provided", param, context)


class UnknownOperationError(BridgeError):
    """No handler registered under the requested name."""
    def __init__(self, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Unknown operation: {operation}",
            ErrorKind.UNKNOWN_OPERATION.value, ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 404,
        )
        self.operation = operation


class TargetNotFoundError(BridgeError):
    """An object referenced by the request does not exist in the host."""
    def __init__(self, target_type: str, target_id: str, context: ErrorContext | None = None):
        super().__init__(
            f"{target_type} '{target_id}' not found",
            ErrorKind.NOT_FOUND.value, ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.target_type = target_type
        self.target_id = target_id


class DependencyMissingError(BridgeError):
    """An optional package the handler needs is not installed."""
    def __init__(self, operation: str, missing: list[str], context: ErrorContext | None = None):
        super().__init__(
            f"Operation '{operation}' requires {', '.join(missing)}, which is not installed",
            ErrorKind.DEPENDENCY_MISSING.value, ErrorCategory.DEPENDENCY,
            ErrorSeverity.ERROR, context, 501,
        )
        self.operation = operation
        self.missing = missing


class ExecutionError(BridgeError):
    """Handler-specific operational fault with a handler-chosen kind."""
    def __init__(
        self,
        message: str,
        error_kind: str = ErrorKind.EXECUTION.value,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, error_kind or ErrorKind.EXECUTION.value,
            ErrorCategory.EXECUTION, ErrorSeverity.ERROR, context, 500,
        )


# ─── Lifecycle Errors (abort start()) ───────────────────────────

class OrchestrationError(BridgeError):
    """Companion worker install/build step failed."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, ErrorKind.ORCHESTRATION.value, ErrorCategory.LIFECYCLE,
            ErrorSeverity.CRITICAL, context, 503,
        )


class BindError(BridgeError):
    """Listener could not acquire the configured address."""
    def __init__(self, host: str, port: int, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Could not bind {host}:{port}: {reason}",
            ErrorKind.BIND.value, ErrorCategory.LIFECYCLE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.host = host
        self.port = port


# ─── Registration Errors (fatal at construction) ────────────────

class DuplicateHandlerError(BridgeError):
    """A second handler was registered under an existing name in the same namespace."""
    def __init__(self, kind: HandlerKind, name: str):
        super().__init__(
            f"Duplicate {kind.value} name '{name}'",
            "duplicate_handler", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, None, 500,
        )
        self.kind = kind
        self.name = name


class RegistryFrozenError(BridgeError):
    """register() called after the registry was handed to a dispatcher."""
    def __init__(self, name: str):
        super().__init__(
            f"Registry is frozen; cannot register '{name}'",
            "registry_frozen", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, None, 500,
        )
