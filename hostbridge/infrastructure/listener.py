"""Bridge Listener — owns the WebSocket listener lifecycle (Stopped -> Starting -> Listening -> Stopping -> Stopped).

Invariants:
    - At most one bind is ever in flight: start() only proceeds from STOPPED, and the
      STARTING state is claimed under the lock before any slow work begins
    - start() while STARTING/LISTENING and stop() while STOPPED/STOPPING are no-ops
    - stop() while STARTING is recorded and applied as soon as the bind completes
    - Any start failure (BridgeError or not) closes the socket and leaves the listener STOPPED
    - stop() closes the listening socket and every open connection before reporting STOPPED
    - The lock guards state only; it is never held while joining the server thread

Design Decisions:
    - The socket is bound here, not by uvicorn: bind errors surface synchronously as BindError
      instead of uvicorn's sys.exit
    - uvicorn.Server runs on its own daemon thread with its own event loop
"""

import asyncio
import logging
import socket
import sys
import threading
import time
from pathlib import Path
from typing import Callable

import uvicorn

from hostbridge.config import Settings
from hostbridge.core.domain_types import ConnectionId, ListenerCommand, ListenerState
from hostbridge.core.errors import BindError, BridgeError, ErrorContext, OrchestrationError
from hostbridge.core.listener_state import transition
from hostbridge.services.orchestrator import CompanionOrchestrator

logger = logging.getLogger(__name__)

_SHUTDOWN_JOIN_SECONDS = 5.0


class BridgeListener:
    """Singleton-per-context network listener. Safe to start/stop from any thread."""

    def __init__(
        self,
        settings: Settings,
        app_factory: Callable[[], object],
        orchestrator: CompanionOrchestrator | None = None,
    ):
        self._settings = settings
        self._app_factory = app_factory
        self._orchestrator = orchestrator or CompanionOrchestrator.from_settings(settings)
        self._lock = threading.RLock()
        self._state = ListenerState.STOPPED
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None
        self._socket: socket.socket | None = None
        self._clients: dict[ConnectionId, str] = {}
        self._stop_pending = False

    # ─── State ───────────────────────────────────────────────────

    @property
    def state(self) -> ListenerState:
        return self._state

    @property
    def is_listening(self) -> bool:
        return self._state == ListenerState.LISTENING

    @property
    def port(self) -> int | None:
        """Port actually bound (differs from settings.port when that is 0)."""
        sock = self._socket
        return sock.getsockname()[1] if sock else None

    @property
    def url(self) -> str | None:
        port = self.port
        if port is None:
            return None
        return f"ws://{self._settings.host}:{port}{self._settings.endpoint_path}"

    @property
    def clients(self) -> dict[ConnectionId, str]:
        with self._lock:
            return dict(self._clients)

    def _apply(self, command: ListenerCommand) -> ListenerState:
        previous = self._state
        self._state = transition(previous, command)
        if self._state != previous:
            logger.debug(
                f"Listener {previous.value} -> {self._state.value}",
                extra={"listener_state": self._state.value},
            )
        return self._state

    # ─── Connections ─────────────────────────────────────────────

    def register_client(self, connection_id: ConnectionId, peer: str) -> None:
        with self._lock:
            self._clients[connection_id] = peer
        logger.info(f"Client connected: {peer}", extra={"connection_id": connection_id})

    def unregister_client(self, connection_id: ConnectionId) -> None:
        with self._lock:
            peer = self._clients.pop(connection_id, None)
        if peer is not None:
            logger.info(f"Client disconnected: {peer}", extra={"connection_id": connection_id})

    # ─── Lifecycle ───────────────────────────────────────────────

    def start(self, worker_path: str | Path | None = None, build: bool | None = None) -> bool:
        """Bring the listener up. Returns True when LISTENING after the call."""
        with self._lock:
            if self._state != ListenerState.STOPPED:
                logger.info(
                    f"Listener is {self._state.value}; start ignored",
                    extra={"listener_state": self._state.value},
                )
                return self._state == ListenerState.LISTENING
            self._apply(ListenerCommand.START)
            self._stop_pending = False

        sock = None
        try:
            self._prepare_worker(worker_path, build)
            sock = self._bind()
            self._serve(sock)
        except BridgeError as e:
            logger.error(
                f"Failed to start bridge listener: {e.message}",
                extra={"error_kind": e.error_kind, "worker_path": e.context.worker_path},
            )
            self._abort_start(sock)
            return False
        except Exception as e:
            logger.error(f"Unexpected failure starting bridge listener: {e}", exc_info=True)
            self._abort_start(sock)
            return False

        with self._lock:
            self._apply(ListenerCommand.BOUND)
            stop_pending = self._stop_pending
        logger.info(
            f"Bridge listening on {self.url}",
            extra={"listener_state": ListenerState.LISTENING.value},
        )
        if stop_pending:
            logger.info("Stop was requested during startup; stopping now")
            self.stop()
            return False
        return True

    def _abort_start(self, sock: socket.socket | None) -> None:
        if self._server is not None:
            self._server.should_exit = True
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(_SHUTDOWN_JOIN_SECONDS)
        if sock is not None:
            sock.close()
        with self._lock:
            self._server = self._thread = self._socket = None
            self._stop_pending = False
            self._apply(ListenerCommand.FAIL)

    def stop(self) -> None:
        """Shut the listener down. A stop during STARTING takes effect once the bind completes."""
        with self._lock:
            if self._state == ListenerState.STARTING:
                self._stop_pending = True
                logger.info(
                    "Listener is starting; stop deferred until startup completes",
                    extra={"listener_state": self._state.value},
                )
                return
            if self._state != ListenerState.LISTENING:
                logger.debug(
                    f"Listener is {self._state.value}; stop ignored",
                    extra={"listener_state": self._state.value},
                )
                return
            self._apply(ListenerCommand.STOP)
            server, thread, sock = self._server, self._thread, self._socket

        server.should_exit = True
        thread.join(_SHUTDOWN_JOIN_SECONDS)
        if thread.is_alive():
            logger.warning("Listener did not shut down gracefully; forcing exit")
            server.force_exit = True
            thread.join(_SHUTDOWN_JOIN_SECONDS)
        sock.close()

        with self._lock:
            self._server = self._thread = self._socket = None
            self._clients.clear()
            self._apply(ListenerCommand.CLOSED)
        logger.info("Bridge listener stopped", extra={"listener_state": ListenerState.STOPPED.value})

    # ─── Steps ───────────────────────────────────────────────────

    def _prepare_worker(self, worker_path: str | Path | None, build: bool | None) -> None:
        resolved = worker_path or self._settings.worker_path_override
        context = ErrorContext(worker_path=str(resolved) if resolved else None)
        if not resolved or not Path(resolved).is_dir():
            raise OrchestrationError(
                f"Companion worker directory not found: {resolved or '<unset>'}", context,
            )
        if build is None:
            build = self._settings.auto_build_worker
        if not build:
            return
        result = self._orchestrator.ensure_built(resolved)
        if result.attempted and not result.succeeded:
            raise OrchestrationError(
                f"Companion worker build failed: {result.diagnostic}", context,
            )

    def _bind(self) -> socket.socket:
        host, port = self._settings.host, self._settings.port
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            if sys.platform != "win32":
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
            sock.listen(128)
        except (OSError, OverflowError, ValueError) as e:
            sock.close()
            raise BindError(host, port, getattr(e, "strerror", None) or str(e))
        return sock

    def _serve(self, sock: socket.socket) -> None:
        config = uvicorn.Config(
            self._app_factory(),
            lifespan="off",
            log_config=None,
            log_level="warning",
            timeout_graceful_shutdown=int(_SHUTDOWN_JOIN_SECONDS),
        )
        server = uvicorn.Server(config)
        thread = threading.Thread(
            target=self._run_server, args=(server, sock), name="hostbridge-listener", daemon=True,
        )
        with self._lock:
            self._server, self._thread, self._socket = server, thread, sock
        thread.start()

        deadline = time.monotonic() + self._settings.startup_timeout_seconds
        while not server.started and thread.is_alive() and time.monotonic() < deadline:
            time.sleep(0.01)
        if server.started:
            return

        server.should_exit = True
        thread.join(_SHUTDOWN_JOIN_SECONDS)
        sock_name = sock.getsockname()
        sock.close()
        with self._lock:
            self._server = self._thread = self._socket = None
        raise BindError(sock_name[0], sock_name[1], "server did not start")

    def _run_server(self, server: uvicorn.Server, sock: socket.socket) -> None:
        try:
            asyncio.run(server.serve(sockets=[sock]))
        except Exception as e:
            logger.error(f"Listener thread crashed: {e}", exc_info=True)
        finally:
            with self._lock:
                if self._server is server and self._state == ListenerState.LISTENING:
                    logger.warning("Listener exited unexpectedly")
                    sock.close()
                    self._server = self._thread = self._socket = None
                    self._clients.clear()
                    self._apply(ListenerCommand.CLOSED)
