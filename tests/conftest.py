"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Callable, Generator
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from myownwebserver import WebServer, ServerConfig


# Smallest valid GIF: header, 1x1 screen, no global color table, trailer.
# Contains bytes that are not valid UTF-8 and a CRLF pair.
GIF_BYTES = b"GIF89a\x01\x00\x01\x00\x00\x00\x00;\r\n\xff\xfe"


@pytest.fixture
def web_root(tmp_path: Path) -> Path:
    """A web root with one file of each kind."""
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_bytes(b"hello")
    (root / "notes.txt").write_bytes("line one\r\nline two, café\n".encode("utf-8"))
    (root / "pixel.gif").write_bytes(GIF_BYTES)
    (root / "photo.bmp").write_bytes(b"BM")
    return root


@pytest.fixture
def gif_bytes() -> bytes:
    return GIF_BYTES


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    """Directory for myOwnWebServer.log."""
    path = tmp_path / "logs"
    path.mkdir()
    return path


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@pytest.fixture
def config(web_root: Path, log_dir: Path, free_port: int) -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        web_root=str(web_root),
        host="127.0.0.1",
        port=free_port,
        log_dir=str(log_dir),
        log_level="WARNING",
    )


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class

    def __init__(self, server: WebServer):
        self.server = server
        self.port = server.config.port
        self._thread: threading.Thread = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_started(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def request(self, data: bytes) -> bytes:
        """Send raw bytes, return everything the server writes until it closes."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            s.sendall(data)
            s.shutdown(socket.SHUT_WR)  # Lets the server's next read return b""
            return recv_all(s)

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


def recv_all(sock: socket.socket) -> bytes:
    """Read until the peer closes the connection."""
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


@pytest.fixture
def start_server() -> Generator[Callable[[ServerConfig], TestServer], None, None]:
    """Factory that starts servers and stops them all at teardown."""
    started = []

    def start(config: ServerConfig) -> TestServer:
        test_srv = TestServer(WebServer(config))
        test_srv.start()
        started.append(test_srv)
        return test_srv

    yield start

    for test_srv in started:
        test_srv.stop()


@pytest.fixture
def test_server(config: ServerConfig, start_server) -> TestServer:
    """Create and start a test server."""
    return start_server(config)


@pytest.fixture
def read_until_closed() -> Callable[[socket.socket], bytes]:
    """Reads a socket until the server closes it."""
    return recv_all
