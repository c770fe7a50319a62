"""Send Log Message tool — writes a caller-supplied message to the bridge log.

Invariants:
    - type is one of info / warning / error (case-insensitive); anything else logs as info
    - Messages are logged on the hostbridge.remote logger so they can be filtered separately
"""

import logging
from typing import Any

from hostbridge.core.results import Ok
from hostbridge.services.handler_base import ToolHandler

remote_logger = logging.getLogger("hostbridge.remote")

_LEVELS = {
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class SendLogMessageTool(ToolHandler):
    name = "send_log_message"
    description = "Writes a message to the bridge log at info, warning, or error level"
    required_params = ("message",)

    def execute(self, params: dict[str, Any]) -> Ok:
        message = str(params["message"])
        level_name = str(params.get("type") or "info").lower()
        remote_logger.log(_LEVELS.get(level_name, logging.INFO), message)
        return Ok(f"Message displayed: {message}")
