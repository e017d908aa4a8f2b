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

from minihttp import HTTPServer, ServerConfig
from minihttp.http.router import Router


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /echo/abc HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: pytest/1.0\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request uploading a file."""
    body = b"hello"
    return (
        b"POST /files/test.txt HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
        b"Content-Length: %d\r\n" % len(body)
        + b"\r\n"
    ) + body


@pytest.fixture
def serve_dir(tmp_path: Path) -> str:
    """Serve directory with the trailing slash file paths are joined with."""
    return str(tmp_path) + "/"


@pytest.fixture
def config(serve_dir: str) -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        directory=serve_dir,
        timeout=5.0,
        log_level="WARNING",
    )


class RawResponse:
    """A response read off the wire, split into its parts."""

    def __init__(self, data: bytes):
        self.raw = data
        head, _, self.body = data.partition(b"\r\n\r\n")
        lines = head.decode("latin-1").split("\r\n")
        self.status_line = lines[0]
        self.protocol, status, self.reason = self.status_line.split(" ", 2)
        self.status = int(status)
        self.headers = {}
        for line in lines[1:]:
            name, _, value = line.partition(":")
            self.headers[name.strip()] = value.strip()


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class, despite the name

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def send(self, data: bytes, half_close: bool = False) -> bytes:
        """
        Send raw bytes and read until the server closes the connection.

        Args:
            data: Raw request bytes.
            half_close: Shut down our write side after sending, so the
                        server sees end-of-stream.
        """
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            s.sendall(data)
            if half_close:
                s.shutdown(socket.SHUT_WR)

            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)

    def request(self, data: bytes) -> RawResponse:
        """Send a request and parse the response."""
        return RawResponse(self.send(data))


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """Run the full server against a temporary serve directory."""
    test_srv = TestServer(HTTPServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def make_server(config: ServerConfig) -> Generator[Callable[..., TestServer], None, None]:
    """
    Factory for servers with a custom router. Started on creation,
    stopped at teardown.
    """
    started = []

    def factory(router: Optional[Router] = None) -> TestServer:
        test_srv = TestServer(HTTPServer(config, router=router))
        test_srv.start()
        started.append(test_srv)
        return test_srv

    yield factory

    for test_srv in started:
        test_srv.stop()
