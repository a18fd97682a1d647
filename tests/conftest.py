"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator, List

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tcphttp import HTTPServer, ServerConfig
from tcphttp.core import Transport
from tcphttp.handlers import register_demo_routes
from tcphttp.http import HTTPRequest, HTTPResponse, ok


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET / HTTP/1.1\r\n"
        b"Host: localhost:3000\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_form_request() -> bytes:
    """Sample HTTP POST request with a URL-encoded body."""
    body = b"name=FirstName%20LastName&email=bsmth%40example.com"
    head = (
        "POST /submit HTTP/1.1\r\n"
        "Host: localhost:3000\r\n"
        "Content-Type: application/x-www-form-urlencoded\r\n"
        f"Content-Length: {len(body)}\r\n"
        "\r\n"
    )
    return head.encode() + body


@pytest.fixture
def config() -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        select_timeout=0.05,
        log_level="WARNING",
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class FakeTransport(Transport):
    """In-memory transport that records what a session writes."""

    def __init__(self, fail_on_send: bool = False):
        self.sent: List[bytes] = []
        self.close_calls = 0
        self.fail_on_send = fail_on_send

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    @property
    def data(self) -> bytes:
        return b"".join(self.sent)

    def sendall(self, data: bytes) -> None:
        if self.fail_on_send:
            raise BrokenPipeError("peer went away")
        self.sent.append(data)

    def close(self) -> None:
        self.close_calls += 1


@pytest.fixture
def transport_factory():
    """The FakeTransport class, for tests that need a customised one."""
    return FakeTransport


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class, despite the name

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.serve, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def connect(self) -> socket.socket:
        sock = socket.create_connection(("127.0.0.1", self.port), timeout=5.0)
        return sock

    def exchange(self, raw: bytes) -> bytes:
        """Send ``raw`` in one write and read until the server closes."""
        with self.connect() as sock:
            sock.sendall(raw)
            chunks = []
            while True:
                chunk = sock.recv(65536)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A running server with the demo routes plus a couple of test routes."""
    server = HTTPServer(config)
    register_demo_routes(server)

    @server.get("/created")
    def created_route(request: HTTPRequest) -> HTTPResponse:
        return HTTPResponse(201, "text/plain", "made it")

    @server.get("/boom")
    def failing_route(request: HTTPRequest) -> HTTPResponse:
        raise RuntimeError("handler exploded")

    @server.get("/unicode")
    def unicode_route(request: HTTPRequest) -> HTTPResponse:
        return ok("café ☕")

    @server.get("/bad")
    def unencodable_route(request: HTTPRequest) -> HTTPResponse:
        return HTTPResponse(200, "text/plain", None)

    test_srv = TestServer(server)
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def small_limit_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A running demo server that answers 413 above 1 KiB."""
    config.buffer_size = 4096
    config.max_request_size = 1024
    server = HTTPServer(config)
    register_demo_routes(server)

    test_srv = TestServer(server)
    test_srv.start()

    yield test_srv

    test_srv.stop()
