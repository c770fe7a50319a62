"""Structured Logging — JSON formatter and setup for bridge observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (operation, error_kind, connection_id, ...) surfaced when present
    - enable_info_logs=False raises the root level to WARNING; warnings and errors always show

Design Decisions:
    - log_format selects JSON lines (log shippers) or "[hostbridge]"-prefixed text (terminals)
    - setup_logging is called once by the CLI entry point; library use leaves logging alone
"""

import json
import logging
from datetime import datetime, timezone

LOG_PREFIX = "[hostbridge]"
_HANDLER_NAME = "hostbridge"

_EXTRA_FIELDS = (
    "operation", "error_kind", "connection_id", "worker_path",
    "listener_state", "exit_code", "command",
)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def level_for(settings) -> str:
    """Root log level implied by the settings snapshot."""
    return "INFO" if settings.enable_info_logs else "WARNING"


def setup_logging(level: str = "INFO", fmt: str = "text"):
    """Configure logging for the bridge process. Repeated calls replace the previous handler."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            f"%(asctime)s {LOG_PREFIX} %(levelname)s %(name)s: %(message)s",
        ))
    handler.set_name(_HANDLER_NAME)
    for existing in list(logging.root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logging.root.removeHandler(existing)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
