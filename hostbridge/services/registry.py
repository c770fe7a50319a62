"""Handler Registry — two disjoint name -> handler tables (tools, resources).

Invariants:
    - Names are unique within each namespace; a tool and a resource may share a name
    - Duplicate registration raises DuplicateHandlerError (fatal at construction)
    - After freeze() the registry never changes; register() raises RegistryFrozenError
    - resolve() is an exact, case-sensitive dict lookup
    - Handlers whose optional dependencies are missing are registered as stubs
      answering dependency_missing, so every name a client sees behaves uniformly

Design Decisions:
    - Explicit registration list in build_context(): every operation visible in one place
    - MappingProxyType views after freeze: read-only sharing across connection threads
"""

import logging
from types import MappingProxyType
from typing import Any, Iterable

from hostbridge.core.domain_types import HandlerKind, OperationName
from hostbridge.core.errors import (
    DependencyMissingError, DuplicateHandlerError, RegistryFrozenError,
)
from hostbridge.core.results import Err
from hostbridge.services.handler_base import BridgeHandler, HandlerDescriptor

logger = logging.getLogger(__name__)


class MissingDependencyHandler(BridgeHandler):
    """Stands in for a handler whose required modules are not importable."""

    def __init__(self, descriptor: HandlerDescriptor):
        self.name = descriptor.name
        self.kind = descriptor.kind
        self.description = descriptor.description
        self._missing = list(descriptor.missing)

    def execute(self, params: dict[str, Any]) -> Err:
        err = DependencyMissingError(self.name, self._missing)
        return Err(err.error_kind, err.message)


class Registry:
    """Append-only while building, immutable once frozen."""

    def __init__(self):
        self._tables: dict[HandlerKind, dict[str, tuple[HandlerDescriptor, BridgeHandler]]] = {
            HandlerKind.TOOL: {},
            HandlerKind.RESOURCE: {},
        }
        self._frozen = False

    @classmethod
    def build(cls, handlers: Iterable[BridgeHandler]) -> "Registry":
        """Register every handler and freeze."""
        registry = cls()
        for handler in handlers:
            registry.add(handler)
        return registry.freeze()

    def add(self, handler: BridgeHandler) -> HandlerDescriptor:
        descriptor = handler.descriptor()
        self.register(descriptor, handler)
        return descriptor

    def register(self, descriptor: HandlerDescriptor, handler: BridgeHandler) -> None:
        if self._frozen:
            raise RegistryFrozenError(descriptor.name)
        if not descriptor.name:
            raise ValueError(f"Handler {handler!r} has no name")
        table = self._tables[descriptor.kind]
        if descriptor.name in table:
            raise DuplicateHandlerError(descriptor.kind, descriptor.name)
        if not descriptor.available:
            logger.warning(
                f"Registering {descriptor.kind.value} '{descriptor.name}' as unavailable: "
                f"missing {', '.join(descriptor.missing)}",
                extra={"operation": descriptor.name},
            )
            handler = MissingDependencyHandler(descriptor)
        table[descriptor.name] = (descriptor, handler)
        logger.info(
            f"Registered {descriptor.kind.value}: {descriptor.name}",
            extra={"operation": descriptor.name},
        )

    def freeze(self) -> "Registry":
        if not self._frozen:
            self._tables = {
                kind: MappingProxyType(table) for kind, table in self._tables.items()
            }
            self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def resolve(self, kind: HandlerKind, name: OperationName) -> BridgeHandler | None:
        """Handler registered under name in kind's namespace, or None."""
        entry = self._tables[kind].get(name)
        return entry[1] if entry else None

    def lookup(self, name: OperationName) -> tuple[HandlerDescriptor, BridgeHandler] | None:
        """Resolve an operation name: tools first, then resources."""
        for kind in (HandlerKind.TOOL, HandlerKind.RESOURCE):
            entry = self._tables[kind].get(name)
            if entry:
                return entry
        return None

    def descriptors(self, kind: HandlerKind | None = None) -> list[HandlerDescriptor]:
        kinds = [kind] if kind else list(self._tables)
        return [
            descriptor
            for k in kinds
            for descriptor, _ in self._tables[k].values()
        ]

    def names(self, kind: HandlerKind) -> list[str]:
        return list(self._tables[kind].keys())

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None

    def __len__(self) -> int:
        return sum(len(table) for table in self._tables.values())
