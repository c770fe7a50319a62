"""Echo tool — returns the caller's message unchanged. Used as a round-trip probe."""

from typing import Any

from hostbridge.core.results import Ok
from hostbridge.services.handler_base import ToolHandler


class EchoTool(ToolHandler):
    name = "echo"
    description = "Returns the given message unchanged"
    required_params = ("message",)

    def execute(self, params: dict[str, Any]) -> Ok:
        return Ok(str(params["message"]))
