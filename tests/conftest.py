"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Callable, Generator, Optional

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hellohttp import HTTPServer, ServerConfig
from hellohttp.handlers import MemoryBodySource
from hellohttp.http import Router


HELLO_BODY = b"<h1>Hi</h1>"
NOT_FOUND_BODY = b"<h1>Oops</h1>"


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request for the root page."""
    return b"GET / HTTP/1.1\r\nHost: x\r\n\r\n"


@pytest.fixture
def sample_missing_request() -> bytes:
    """Sample HTTP GET request for a path with no route."""
    return b"GET /missing HTTP/1.1\r\n\r\n"


@pytest.fixture
def body_source() -> MemoryBodySource:
    """Body store used by the concrete scenarios."""
    return MemoryBodySource({"hello": HELLO_BODY, "404.html": NOT_FOUND_BODY})


@pytest.fixture
def router() -> Router:
    """Single rule: GET / → 200 with the 'hello' body."""
    router = Router()
    router.add_route("GET", "/", "HTTP/1.1 200 OK", "hello")
    return router


@pytest.fixture
def config() -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class despite the name

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.socket_server.server_address[1]

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.socket_server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.stop()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def connect(self, timeout: float = 5.0) -> socket.socket:
        """Open a client connection to the server."""
        return socket.create_connection(("127.0.0.1", self.port), timeout=timeout)

    def request(self, data: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes and read the response until the server closes."""
        with self.connect(timeout) as client:
            client.sendall(data)
            return self.recv_all(client)

    @staticmethod
    def recv_all(sock: socket.socket) -> bytes:
        """Read until EOF."""
        chunks = []
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                return b"".join(chunks)
            chunks.append(chunk)


@pytest.fixture
def start_server() -> Generator[Callable[[HTTPServer], TestServer], None, None]:
    """Start any HTTPServer in the background; all are stopped at teardown."""
    started = []

    def _start(server: HTTPServer) -> TestServer:
        test_srv = TestServer(server)
        test_srv.start()
        started.append(test_srv)
        return test_srv

    yield _start

    for test_srv in started:
        test_srv.stop()


@pytest.fixture
def test_server(config, router, body_source, start_server) -> TestServer:
    """A running server with the scenario route table and bodies."""
    return start_server(HTTPServer(config, router=router, body_source=body_source))
