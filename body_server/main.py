"""FastAPI app and process entrypoint for the body server."""
from __future__ import annotations

import logging
import signal
import sys
import threading

from fastapi import FastAPI

from body_server.api.body import router as body_router
from body_server.api.errors import register_exception_handlers
from body_server.config import ServerConfig, build_parser, debug_requested, resolve_config
from body_server.log import setup_logging
from body_server.runner.server import (
    SHUTDOWN_TIMEOUT_SEC,
    BodyServer,
    ServerShutdownError,
    ServerStartError,
)
from body_server.service.body_source import BodySource

_ROUTERS = (body_router,)


def create_app(config: ServerConfig, logger: logging.Logger, body_source: BodySource | None = None) -> FastAPI:
    """Create and configure FastAPI application instance."""
    app = FastAPI(title="Body Server", version="v1", docs_url=None, redoc_url=None, openapi_url=None)

    app.state.config = config
    app.state.logger = logger
    app.state.body_source = body_source or BodySource()
    register_exception_handlers(app, logger)

    for router in _ROUTERS:
        app.include_router(router)
        if config.debug:
            for route in router.routes:
                for method in sorted(getattr(route, "methods", None) or ()):
                    logger.debug("%-6s %-25s --> %s", method, route.path, route.name)

    return app


def wait_for_interrupt(poll_interval_sec: float = 0.5) -> None:
    """Block the calling (main) thread until SIGINT arrives."""
    stop = threading.Event()
    previous = signal.signal(signal.SIGINT, lambda signum, frame: stop.set())
    try:
        while not stop.wait(poll_interval_sec):
            pass
    finally:
        signal.signal(signal.SIGINT, previous)


def main(argv: list[str] | None = None) -> int:
    """Resolve config, serve until interrupted, shut down gracefully."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logger = setup_logging(debug=debug_requested(args))
    try:
        config = resolve_config(args, logger)
    except ValueError as e:
        parser.error(str(e))

    app = create_app(config, logger)
    server = BodyServer(config, app, logger)
    try:
        server.start()
    except ServerStartError:
        return 1

    wait_for_interrupt()

    try:
        server.shutdown(SHUTDOWN_TIMEOUT_SEC)
    except ServerShutdownError as e:
        logger.critical("Error server shutdown: %s", e)
        return 1
    logger.info("Server exiting")
    return 0


if __name__ == "__main__":
    sys.exit(main())
