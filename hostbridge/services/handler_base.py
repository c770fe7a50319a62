"""Handler Contract — base classes every tool and resource implements.

Invariants:
    - name is non-empty and unique within its kind's namespace
    - execute() receives the request params dict and returns Ok / Err (or raises BridgeError)
    - synchronous handlers define a plain execute(); asynchronous ones define async execute()
    - required_params are checked by the dispatcher before execute() is ever called

Design Decisions:
    - Class attributes for metadata (name, description, required_params): one handler
      class reads top to bottom like its wire contract
"""

import importlib.util
from dataclasses import dataclass, field
from typing import Any

from hostbridge.core.domain_types import HandlerKind
from hostbridge.core.results import HandlerResult


def _importable(module: str) -> bool:
    try:
        return importlib.util.find_spec(module) is not None
    except (ImportError, ValueError):
        # parent package missing, or a module with no spec
        return False


@dataclass(frozen=True)
class HandlerDescriptor:
    """Registry metadata for one handler."""
    name: str
    kind: HandlerKind
    synchronous: bool = True
    description: str = ""
    required_params: tuple[str, ...] = ()
    requires: tuple[str, ...] = ()
    available: bool = True
    missing: tuple[str, ...] = field(default=())

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "description": self.description,
            "synchronous": self.synchronous,
            "requiredParams": list(self.required_params),
            "available": self.available,
        }


class BridgeHandler:
    """Base class for handlers. Subclass ToolHandler or ResourceHandler instead."""

    name: str = ""
    description: str = ""
    kind: HandlerKind = HandlerKind.TOOL
    synchronous: bool = True
    required_params: tuple[str, ...] = ()
    requires: tuple[str, ...] = ()

    def execute(self, params: dict[str, Any]) -> HandlerResult:
        raise NotImplementedError

    def missing_dependencies(self) -> list[str]:
        """Modules named in requires that cannot be imported in this process."""
        return [mod for mod in self.requires if not _importable(mod)]

    def descriptor(self) -> HandlerDescriptor:
        missing = tuple(self.missing_dependencies())
        return HandlerDescriptor(
            name=self.name,
            kind=self.kind,
            synchronous=self.synchronous,
            description=self.description,
            required_params=tuple(self.required_params),
            requires=tuple(self.requires),
            available=not missing,
            missing=missing,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.kind.value}:{self.name}>"


class ToolHandler(BridgeHandler):
    """Operation that may cause a side effect in the host."""
    kind = HandlerKind.TOOL


class ResourceHandler(BridgeHandler):
    """Operation that returns read-only data."""
    kind = HandlerKind.RESOURCE
