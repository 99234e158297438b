import logging
import socket

import pytest
from fastapi.testclient import TestClient

from body_server.config import ServerConfig
from body_server.main import create_app


@pytest.fixture
def logger() -> logging.Logger:
    # Not a child of "body_server": setup_logging() turns propagation off there.
    return logging.getLogger("tests.body_server")


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run the test from an empty working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_body(workdir):
    def _write(content: str | bytes) -> None:
        path = workdir / "body.txt"
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_bytes(content.encode("utf-8"))

    return _write


@pytest.fixture
def client(workdir, logger) -> TestClient:
    return TestClient(create_app(ServerConfig(), logger))


@pytest.fixture
def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
