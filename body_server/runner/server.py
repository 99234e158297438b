"""Listener lifecycle for the body server.

Responsibilities:
- Bind the ASGI app to host:port and serve it on a background thread.
- Count in-flight HTTP requests.
- Drain in-flight requests on shutdown within a bounded timeout, then
  force-close whatever is left and report it.

This module MUST NOT implement request handling.
"""
from __future__ import annotations

import asyncio
import logging
import threading
import time

import uvicorn

from body_server.config import ServerConfig

KEEP_ALIVE_TIMEOUT_SEC = 300
SHUTDOWN_TIMEOUT_SEC = 5.0
_START_TIMEOUT_SEC = 10.0
_JOIN_SLACK_SEC = 2.0


class ServerStartError(RuntimeError):
    """The listener could not be bound or failed during startup."""


class ServerShutdownError(RuntimeError):
    """Shutdown did not complete cleanly within its timeout."""


class RequestTracker:
    """ASGI wrapper counting active and cancelled HTTP requests.

    Counters are only touched from the event loop thread.
    """

    def __init__(self, app) -> None:
        self.app = app
        self.active = 0
        self.cancelled = 0

    async def __call__(self, scope, receive, send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        self.active += 1
        try:
            await self.app(scope, receive, send)
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        finally:
            self.active -= 1


class BodyServer:
    """Run an ASGI app under uvicorn with a start/shutdown lifecycle."""

    def __init__(self, config: ServerConfig, app, logger: logging.Logger) -> None:
        self._config = config
        self._logger = logger
        self._tracker = RequestTracker(app)
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None
        self._bound_port: int | None = None

    @property
    def port(self) -> int:
        """Return the bound port (differs from config when binding port 0)."""
        if self._bound_port is None:
            return self._config.port
        return self._bound_port

    @property
    def in_flight(self) -> int:
        return self._tracker.active

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _uvicorn_config(self) -> uvicorn.Config:
        return uvicorn.Config(
            self._tracker,
            host=self._config.host,
            port=self._config.port,
            log_config=None,
            log_level=logging.DEBUG if self._config.debug else logging.WARNING,
            access_log=self._config.debug,
            timeout_keep_alive=KEEP_ALIVE_TIMEOUT_SEC,
            timeout_graceful_shutdown=SHUTDOWN_TIMEOUT_SEC,
            lifespan="off",
        )

    def start(self) -> None:
        """Bind and serve in the background; return once accepting connections."""
        if self.running:
            raise RuntimeError("server_already_running")

        self._bound_port = None
        self._server = uvicorn.Server(self._uvicorn_config())
        # uvicorn skips signal handler installation off the main thread.
        self._thread = threading.Thread(target=self._server.run, name="body-server", daemon=True)
        self._thread.start()

        deadline = time.monotonic() + _START_TIMEOUT_SEC
        while not self._server.started:
            if not self._thread.is_alive():
                self._logger.critical("listen: cannot bind %s", self._config.address)
                raise ServerStartError(f"cannot bind {self._config.address}")
            if time.monotonic() > deadline:
                self._server.should_exit = True
                self._logger.critical("listen: %s not ready after %ss", self._config.address, _START_TIMEOUT_SEC)
                raise ServerStartError(f"startup timeout on {self._config.address}")
            time.sleep(0.01)

        self._bound_port = self._server.servers[0].sockets[0].getsockname()[1]
        self._logger.info("listening on http://%s:%d", self._config.host, self.port)

    def shutdown(self, timeout: float = SHUTDOWN_TIMEOUT_SEC) -> None:
        """Stop accepting connections and drain in-flight requests.

        Requests still running after ``timeout`` seconds are cancelled and
        ``ServerShutdownError`` is raised.
        """
        if self._server is None or self._thread is None:
            return

        self._logger.info("Shutdown Server ...")
        self._server.config.timeout_graceful_shutdown = timeout
        self._server.should_exit = True
        self._thread.join(timeout + _JOIN_SLACK_SEC)

        if self._thread.is_alive():
            self._server.force_exit = True
            self._thread.join(_JOIN_SLACK_SEC)
            raise ServerShutdownError(f"server did not stop within {timeout}s")

        if self._tracker.cancelled:
            raise ServerShutdownError(
                f"{self._tracker.cancelled} in-flight request(s) cancelled after {timeout}s"
            )
        self._logger.debug("server stopped")
