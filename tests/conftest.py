"""
pytest configuration and fixtures.
"""

import socket
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, Generator, Optional
import pytest

# Add src (the package) and tests (sample_types) to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from compreflex import BackendConfig, FacadeConfig, HTTPServer, create_backend, create_facade
from compreflex.http import HTTPRequest, HTTPResponse, Router, ok_json


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample backend request, as the facade sends it."""
    return (
        b"GET /compreflex?comando=unaryInvoke%28builtins%2C+abs%2C+int%2C+-3%29 HTTP/1.1\r\n"
        b"Host: localhost:45000\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: application/json\r\n"
        b"Connection: close\r\n"
        b"\r\n"
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


# =============================================================================
# LIVE SERVERS
# =============================================================================

class LiveServer:
    """Runs an HTTPServer in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    @property
    def url(self) -> str:
        return f"http://127.0.0.1:{self.port}"

    def start(self) -> "LiveServer":
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()
        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")
        return self

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@dataclass
class RawResponse:
    """A response as read off the socket."""

    status: int
    reason: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")


def send_raw(port: int, data: bytes, timeout: float = 5.0) -> bytes:
    """Send raw bytes, read until the server closes the connection."""
    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as sock:
        sock.sendall(data)
        chunks = []
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


def http_get(port: int, target: str, timeout: float = 5.0) -> RawResponse:
    """Minimal GET client; no HTTP library on purpose."""
    raw = send_raw(
        port,
        f"GET {target} HTTP/1.1\r\nHost: 127.0.0.1:{port}\r\nConnection: close\r\n\r\n".encode("utf-8"),
        timeout=timeout,
    )
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("iso-8859-1").split("\r\n")
    _, status, reason = lines[0].split(" ", 2)
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip()] = value.strip()
    return RawResponse(status=int(status), reason=reason, headers=headers, body=body)


@pytest.fixture
def get() -> Callable[[int, str], RawResponse]:
    """The raw GET client as a fixture."""
    return http_get


@pytest.fixture
def backend() -> Generator[LiveServer, None, None]:
    """A running, unrestricted backend on a free port."""
    live = LiveServer(create_backend(BackendConfig(port=0, log_level="WARNING"))).start()
    yield live
    live.stop()


@pytest.fixture
def facade(backend: LiveServer) -> Generator[LiveServer, None, None]:
    """A running facade forwarding to the backend fixture."""
    config = FacadeConfig(port=0, backend_url=backend.url, backend_timeout=5.0, log_level="WARNING")
    live = LiveServer(create_facade(config)).start()
    yield live
    live.stop()


@pytest.fixture
def fixed_backend() -> Generator[LiveServer, None, None]:
    """A stand-in backend answering {"value":7} to everything on /compreflex."""
    router = Router(not_found_message="Use /compreflex")

    @router.route("/compreflex")
    def seven(request: HTTPRequest) -> HTTPResponse:
        return ok_json('{"value":7}')

    live = LiveServer(HTTPServer(BackendConfig(port=0, log_level="WARNING"), router)).start()
    yield live
    live.stop()
