"""Handler Results — discriminated Ok / Err values returned by every handler.

Invariants:
    - Ok always becomes a success envelope; Err always becomes a failure envelope
    - Err.error_kind is never empty (falls back to execution_error)
    - extra keys are merged into the envelope as top-level named fields
"""

from dataclasses import dataclass, field
from typing import Any, Union

from hostbridge.core.domain_types import ErrorKind


@dataclass(frozen=True)
class Ok:
    """Successful handler outcome."""
    message: str
    payload: Any = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Err:
    """Domain fault reported by a handler without raising."""
    error_kind: str
    message: str

    def __post_init__(self):
        if not self.error_kind:
            object.__setattr__(self, "error_kind", ErrorKind.EXECUTION.value)


HandlerResult = Union[Ok, Err]
