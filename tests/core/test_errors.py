"""Error Hierarchy — verifies error kinds, categories, and envelope conversion.

Tests:
    - Request errors carry the wire errorKind values clients depend on
    - to_response() produces a failure envelope without a type field
    - ExecutionError keeps a handler-chosen kind and falls back when empty
"""

from hostbridge.core.domain_types import HandlerKind
from hostbridge.core.errors import (
    BindError, DependencyMissingError, DuplicateHandlerError, ErrorCategory,
    ExecutionError, ParameterValidationError, TargetNotFoundError, UnknownOperationError,
)


def test_missing_parameter_message():
    err = ParameterValidationError.missing("menuPath")
    assert err.error_kind == "validation_error"
    assert err.message == "Required parameter 'menuPath' not provided"
    assert err.field == "menuPath"


def test_unknown_operation_envelope():
    envelope = UnknownOperationError("missing_op").to_response()
    assert envelope.to_wire() == {
        "success": False,
        "errorKind": "unknown_operation",
        "message": "Unknown operation: missing_op",
    }


def test_not_found_and_dependency_kinds():
    assert TargetNotFoundError("GameObject", "Player").error_kind == "not_found_error"
    err = DependencyMissingError("probuilder", ["probuilder_sdk"])
    assert err.error_kind == "dependency_missing"
    assert "probuilder_sdk" in err.message


def test_execution_error_kind_is_handler_chosen():
    assert ExecutionError("boom", "mesh_error").error_kind == "mesh_error"
    assert ExecutionError("boom", "").error_kind == "execution_error"


def test_lifecycle_and_registration_categories():
    assert BindError("127.0.0.1", 8090, "in use").category == ErrorCategory.LIFECYCLE
    dup = DuplicateHandlerError(HandlerKind.TOOL, "echo")
    assert dup.category == ErrorCategory.CONFIGURATION
    assert "echo" in dup.message


def test_http_response_shape():
    body = UnknownOperationError("x").to_http_response()
    assert body["error"]["errorKind"] == "unknown_operation"
    assert body["error"]["severity"] == "warning"
