"""Domain Types — rich types that replace bare primitives across the bridge.

Invariants:
    - OperationName and ConnectionId wrap str — never pass bare strings through the registry API
    - All valid states encoded as Enums — no raw string matching
    - ARTIFACT_RELATIVE_PATH is the single place the companion build output is named

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from pathlib import PurePosixPath
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

OperationName = NewType("OperationName", str)
ConnectionId = NewType("ConnectionId", str)


# ─── Constants ───────────────────────────────────────────────────

ARTIFACT_RELATIVE_PATH = PurePosixPath("build") / "index.js"
REQUEST_TIMEOUT_MINIMUM = 10
DEFAULT_PORT = 8090


# ─── Enums ───────────────────────────────────────────────────────

class HandlerKind(str, Enum):
    """Registry namespaces — a tool and a resource may share a name."""
    TOOL = "tool"
    RESOURCE = "resource"


class ListenerState(str, Enum):
    """Bridge listener lifecycle. STOPPED is both initial and terminal."""
    STOPPED = "stopped"
    STARTING = "starting"
    LISTENING = "listening"
    STOPPING = "stopping"


class ListenerCommand(str, Enum):
    """Events that drive ListenerState transitions."""
    START = "start"
    BOUND = "bound"
    FAIL = "fail"
    STOP = "stop"
    CLOSED = "closed"


class ErrorKind(str, Enum):
    """Wire-level errorKind values produced by the bridge itself.

    Handlers may report any other string through ExecutionError / Err.
    """
    VALIDATION = "validation_error"
    UNKNOWN_OPERATION = "unknown_operation"
    NOT_FOUND = "not_found_error"
    DEPENDENCY_MISSING = "dependency_missing"
    EXECUTION = "execution_error"
    INTERNAL = "internal_error"
    ORCHESTRATION = "orchestration_error"
    BIND = "bind_error"
