"""
pytest configuration and fixtures.
"""

import socket
import threading
import time
from pathlib import Path
from typing import Generator
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webserver import ServerConfig, WebServer


HELLO_PAGE = "<h1>Hello!</h1>"
NOT_FOUND_PAGE = "<h1>Oops!</h1>"


@pytest.fixture
def document_root(tmp_path: Path) -> Path:
    """A document root with small, known pages."""
    (tmp_path / "hello.html").write_text(HELLO_PAGE)
    (tmp_path / "404.html").write_text(NOT_FOUND_PAGE)
    return tmp_path


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@pytest.fixture
def config(free_port: int, document_root: Path) -> ServerConfig:
    """Test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=free_port,
        workers=2,
        timeout=5.0,
        document_root=document_root,
        sleep_seconds=0.5,
        log_level="WARNING",
    )


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # not a test class, despite the name

    def __init__(self, server: WebServer, port: int):
        self.server = server
        self.port = port
        self._thread: threading.Thread = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        # Wait for server to be ready
        for _ in range(50):  # 5 seconds max
            try:
                with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                    s.connect(('127.0.0.1', self.port))
                    return
            except ConnectionRefusedError:
                time.sleep(0.1)

        raise RuntimeError("Server failed to start")

    def request(self, request_line: str) -> bytes:
        """Send one request line and read the response until the server closes."""
        with socket.create_connection(('127.0.0.1', self.port), timeout=10) as s:
            s.sendall(request_line.encode() + b"\r\nHost: localhost\r\n\r\n")
            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)

    def stop(self):
        """Stop the server and wait for run() to return."""
        self.server.shutdown()
        self.server.wait_for_shutdown(timeout=10.0)
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    @property
    def stopped(self) -> bool:
        return self._thread is not None and not self._thread.is_alive()


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A running server on a free port."""
    test_srv = TestServer(WebServer(config), config.port)
    test_srv.start()

    yield test_srv

    test_srv.stop()
