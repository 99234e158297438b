"""Command-line and environment configuration for the body server."""
from __future__ import annotations

import argparse
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from body_server.env import env_bool, env_int, env_str

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 1515

ENV_HOST = "BODY_SERVER_HOST"
ENV_PORT = "BODY_SERVER_PORT"
ENV_DEBUG = "BODY_SERVER_DEBUG"


class ServerConfig(BaseModel):
    """Resolved listener configuration. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)
    debug: bool = False

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``-host``, ``-port`` and ``-debug``."""
    parser = argparse.ArgumentParser(
        prog="body-server",
        description="Serve the JSON document stored in ./body.txt over HTTP.",
    )
    parser.add_argument("-host", "--host", dest="host", default=None, help="host to connect")
    parser.add_argument("-port", "--port", dest="port", type=int, default=None, help="port to connect")
    parser.add_argument(
        "-debug",
        "--debug",
        dest="debug",
        action="store_const",
        const=True,
        default=None,
        help="enable debug",
    )
    return parser


def debug_requested(args: argparse.Namespace) -> bool:
    """Return the debug flag, falling back to the environment."""
    if args.debug is not None:
        return bool(args.debug)
    return env_bool(ENV_DEBUG)


def resolve_config(args: argparse.Namespace, logger: logging.Logger) -> ServerConfig:
    """Apply flag > environment > default precedence and build the config.

    An empty host or a zero port counts as absent. Raises ``ValueError`` for
    values that cannot form a valid config.
    """
    host = args.host if args.host is not None else env_str(ENV_HOST, "")
    port = args.port if args.port is not None else env_int(ENV_PORT, 0)

    host = (host or "").strip()
    if not host:
        logger.warning("host is empty, set default %s", DEFAULT_HOST)
        host = DEFAULT_HOST
    if not port:
        logger.warning("port is empty, set default %d", DEFAULT_PORT)
        port = DEFAULT_PORT

    try:
        return ServerConfig(host=host, port=port, debug=debug_requested(args))
    except ValidationError as e:
        errors = ", ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
        raise ValueError(f"invalid configuration ({errors})") from e
