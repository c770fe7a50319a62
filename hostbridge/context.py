"""Bridge Context — the object built once at process entry and passed to every component.

Invariants:
    - Exactly one Registry, Dispatcher, and BridgeListener per context
    - The registry is frozen before the context is returned
    - Built-in handlers are registered first; a caller handler reusing a built-in
      name in the same namespace fails construction with DuplicateHandlerError
"""

import logging
from pathlib import Path
from typing import Iterable

from hostbridge.config import Settings
from hostbridge.infrastructure.listener import BridgeListener
from hostbridge.main import create_app
from hostbridge.services.dispatch import Dispatcher
from hostbridge.services.handler_base import BridgeHandler
from hostbridge.services.handlers.bridge_status import BridgeStatusResource
from hostbridge.services.handlers.echo import EchoTool
from hostbridge.services.handlers.list_operations import ListOperationsResource
from hostbridge.services.handlers.send_log_message import SendLogMessageTool
from hostbridge.services.orchestrator import CompanionOrchestrator
from hostbridge.services.registry import Registry

logger = logging.getLogger(__name__)


class BridgeContext:
    """Settings + registry + dispatcher + listener, wired together."""

    def __init__(
        self,
        settings: Settings,
        handlers: Iterable[BridgeHandler] = (),
        orchestrator: CompanionOrchestrator | None = None,
        include_builtin: bool = True,
    ):
        self.settings = settings
        builtin = [
            EchoTool(),
            SendLogMessageTool(),
            ListOperationsResource(self),
            BridgeStatusResource(self),
        ] if include_builtin else []
        self.registry = Registry.build([*builtin, *handlers])
        self.dispatcher = Dispatcher(self.registry)
        self.listener = BridgeListener(
            settings,
            app_factory=lambda: create_app(self),
            orchestrator=orchestrator or CompanionOrchestrator.from_settings(settings),
        )

    def autostart(self, worker_path: str | Path | None = None, build: bool | None = None) -> bool:
        """Start the listener if settings.auto_start_server allows it."""
        if not self.settings.auto_start_server:
            logger.info("auto_start_server is disabled; listener not started")
            return False
        return self.listener.start(worker_path, build=build)

    def close(self) -> None:
        self.listener.stop()
