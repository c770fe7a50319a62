"""Envelope Schemas — Pydantic models for the JSON frames exchanged over the bridge socket.

Invariants:
    - RequestEnvelope.operation is a non-empty string (whitespace stripped)
    - RequestEnvelope.params is always a dict (null/absent becomes {})
    - ResponseEnvelope.to_wire() omits unset optional fields; extra named fields pass through
    - Successful responses carry type="text"; failures carry errorKind instead

Design Decisions:
    - errorKind alias on the wire, error_kind in Python (populate_by_name)
    - extra="allow" on responses: handlers attach named fields without schema changes
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from hostbridge.core.errors import ParameterValidationError


class RequestEnvelope(BaseModel):
    """Inbound frame: {"operation": "<name>", "params": {...}, "id"?: ...}."""
    model_config = ConfigDict(extra="ignore")

    operation: str
    params: dict[str, Any] = Field(default_factory=dict)
    id: str | int | None = None

    @field_validator("operation")
    @classmethod
    def strip_operation(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("operation cannot be empty or whitespace")
        return v

    @field_validator("params", mode="before")
    @classmethod
    def default_params(cls, v: Any) -> Any:
        return {} if v is None else v


class ResponseEnvelope(BaseModel):
    """Outbound frame. Exactly one per RequestEnvelope."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    success: bool
    type: str | None = None
    message: str = ""
    payload: Any = None
    error_kind: str | None = Field(None, alias="errorKind")

    @classmethod
    def ok(cls, message: str, payload: Any = None, **extra: Any) -> "ResponseEnvelope":
        return cls(success=True, type="text", message=message, payload=payload, **extra)

    @classmethod
    def error(cls, error_kind: str, message: str, **extra: Any) -> "ResponseEnvelope":
        return cls(success=False, message=message, error_kind=error_kind, **extra)

    def with_request_id(self, request_id: str | int | None) -> "ResponseEnvelope":
        if request_id is None:
            return self
        return type(self).model_validate({**self.model_dump(by_alias=True), "id": request_id})

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return json.dumps(self.to_wire(), ensure_ascii=False, default=str)


def extract_request_id(data: Any) -> str | int | None:
    """Best-effort id lookup so even rejected frames can be correlated."""
    if isinstance(data, dict):
        request_id = data.get("id")
        if isinstance(request_id, (str, int)) and not isinstance(request_id, bool):
            return request_id
    return None


def decode_frame(raw: str | bytes) -> Any:
    """json.loads with failures mapped to ParameterValidationError."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParameterValidationError(f"Request is not valid JSON: {e.msg}")
    except UnicodeDecodeError:
        raise ParameterValidationError("Request is not valid UTF-8")


def parse_request(data: str | bytes | dict) -> RequestEnvelope:
    """Parse a raw frame into a RequestEnvelope.

    Raises ParameterValidationError for invalid JSON, non-object frames,
    and missing/empty operation names.
    """
    if isinstance(data, (str, bytes)):
        data = decode_frame(data)
    if not isinstance(data, dict):
        raise ParameterValidationError("Request must be a JSON object")
    try:
        return RequestEnvelope.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(loc) for loc in first["loc"]) or None
        if field == "operation":
            raise ParameterValidationError(
                "Required parameter 'operation' not provided", field,
            )
        raise ParameterValidationError(f"Invalid request field '{field}': {first['msg']}", field)
