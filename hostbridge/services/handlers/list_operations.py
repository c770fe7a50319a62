"""List Operations resource — describes every registered tool and resource."""

from typing import Any

from hostbridge.core.domain_types import ErrorKind, HandlerKind
from hostbridge.core.results import Err, Ok
from hostbridge.services.handler_base import ResourceHandler


class ListOperationsResource(ResourceHandler):
    name = "list_operations"
    description = "Lists registered operations with their kind, parameters, and availability"

    def __init__(self, context):
        self._context = context

    def execute(self, params: dict[str, Any]) -> Ok | Err:
        kind = params.get("kind")
        if kind:
            try:
                kind = HandlerKind(kind)
            except ValueError:
                return Err(
                    ErrorKind.VALIDATION.value,
                    f"Parameter 'kind' must be one of: {', '.join(k.value for k in HandlerKind)}",
                )
        descriptors = self._context.registry.descriptors(kind or None)
        return Ok(
            f"{len(descriptors)} operations registered",
            payload=[d.to_dict() for d in descriptors],
        )
