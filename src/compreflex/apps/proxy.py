"""
=============================================================================
PROXY FORWARDER
=============================================================================

The facade's outbound call to the backend, written against raw sockets like
the rest of the HTTP layer:

    forward('Class(math)')
        │
        │  GET /compreflex?comando=Class%28math%29 HTTP/1.1
        │  Host: localhost:45000
        │  Connection: close
        ▼
    ┌─────────┐
    │ backend │
    └────┬────┘
         │  HTTP/1.1 200 OK
         │  Content-Length: 87
         │  ...
         │  {"value":{"class":"math",...}}
         ▼
    returns '{"value":{"class":"math",...}}'    ← body only, untouched

The body is relayed whatever the backend's status: a 400 or 404 from the
backend already carries a {"error": "..."} document. Only failing to talk
to the backend at all (refused, timed out, garbled reply) is a ProxyError.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import BinaryIO, Dict, Optional
from urllib.parse import quote_plus, urlsplit
import logging
import socket

from ..http.request import parse_header_line


logger = logging.getLogger(__name__)

USER_AGENT = "compreflex-facade"

# Status line plus headers of the backend's reply
MAX_HEADER_BYTES = 64 * 1024


class ProxyError(Exception):
    """The backend could not be reached or sent something that is not HTTP."""


@dataclass
class BackendReply:
    """A decoded backend response."""

    status: int
    reason: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""


class ProxyForwarder:
    """
    Forwards commands to a backend's /compreflex endpoint.

    Example:
        forwarder = ProxyForwarder("http://localhost:45000")
        forwarder.forward("unaryInvoke(builtins, abs, int, -3)")
        # '{"value":3}'
    """

    def __init__(self, backend_url: str = "http://localhost:45000", timeout: float = 10.0):
        parts = urlsplit(backend_url)
        if parts.scheme != "http" or not parts.hostname:
            raise ValueError(f"Invalid backend URL: {backend_url}")

        self.backend_url = backend_url
        self.host = parts.hostname
        self.port = parts.port or 80
        self.base_path = parts.path.rstrip("/")
        self.timeout = timeout

    def target_for(self, command: str) -> str:
        """Request target for command, re-encoded with quote_plus."""
        return f"{self.base_path}/compreflex?comando={quote_plus(command)}"

    def forward(self, command: str) -> str:
        """
        Send command to the backend and return its response body verbatim.

        Raises:
            ProxyError: Connection, timeout or protocol failure.
        """
        reply = self.fetch(self.target_for(command))
        if not 200 <= reply.status < 300:
            logger.info(f"Backend answered {reply.status} {reply.reason}; relaying its body")
        return reply.body

    def fetch(self, target: str) -> BackendReply:
        """GET target from the backend over a fresh connection."""
        request = (
            f"GET {target} HTTP/1.1\r\n"
            f"Host: {self.host}:{self.port}\r\n"
            f"User-Agent: {USER_AGENT}\r\n"
            f"Accept: application/json\r\n"
            f"Connection: close\r\n"
            f"\r\n"
        )
        logger.debug(f"Forwarding to {self.host}:{self.port}{target}")

        try:
            with socket.create_connection((self.host, self.port), timeout=self.timeout) as sock:
                sock.sendall(request.encode("utf-8"))
                with sock.makefile("rb") as reader:
                    return self._read_reply(reader)
        except OSError as e:
            logger.warning(f"Backend {self.host}:{self.port} failed: {e}")
            raise ProxyError(str(e) or type(e).__name__) from e

    @staticmethod
    def _read_reply(reader: BinaryIO) -> BackendReply:
        status_line = reader.readline(MAX_HEADER_BYTES).decode("iso-8859-1").strip()
        parts = status_line.split(" ", 2)
        if len(parts) < 2 or not parts[0].startswith("HTTP/") or not parts[1].isdigit():
            raise ProxyError(f"Invalid response from backend: {status_line!r}")
        status = int(parts[1])
        reason = parts[2] if len(parts) > 2 else ""

        headers: Dict[str, str] = {}
        consumed = len(status_line)
        while True:
            raw = reader.readline(MAX_HEADER_BYTES)
            consumed += len(raw)
            if consumed > MAX_HEADER_BYTES:
                raise ProxyError("Backend response headers too large")
            line = raw.decode("iso-8859-1").rstrip("\r\n")
            if not line:
                break
            header = parse_header_line(line)
            if header is not None:
                headers[header[0].lower()] = header[1]

        length = _content_length(headers)
        if length is None:
            data = reader.read()
        else:
            data = reader.read(length)
            if len(data) < length:
                raise ProxyError(f"Backend response truncated ({len(data)} of {length} bytes)")

        return BackendReply(status=status, reason=reason, headers=headers,
                            body=data.decode("utf-8", errors="replace"))


def _content_length(headers: Dict[str, str]) -> Optional[int]:
    value = headers.get("content-length")
    if value is None:
        return None
    try:
        return max(int(value), 0)
    except ValueError:
        raise ProxyError(f"Invalid Content-Length from backend: {value!r}") from None
