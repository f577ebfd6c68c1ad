"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

One accepted client socket, used for exactly one request/response exchange.

=============================================================================
TCP IS A BYTE STREAM
=============================================================================

TCP does not preserve message boundaries. A request line may arrive split
across several recv() calls:

    recv() → "GET /compreflex?coman"
    recv() → "do=Class(math) HTTP/1.1\\r\\nHost: ..."

Instead of buffering by hand we wrap the socket in a buffered binary file
(socket.makefile("rb")). readline() then blocks until a full CRLF-terminated
line is available, which is exactly what the request parser consumes.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

Both servers answer with "Connection: close" and never read a body:

    ┌────────┐ accept ┌─────────┐ parse ┌────────────┐ send ┌─────────┐
    │  NEW   │ ─────► │ READING │ ────► │ PROCESSING │ ───► │ WRITING │
    └────────┘        └─────────┘       └────────────┘      └────┬────┘
                            │                                    │
                            └──────────── error ──────────┐      │
                                                          ▼      ▼
                                                       ┌──────────┐
                                                       │  CLOSED  │
                                                       └──────────┘

The context manager guarantees the socket is closed on every path.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import BinaryIO, Optional
import uuid

from ..http.request import HTTPRequest, RequestParser


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states."""
    NEW = "new"                # Just accepted
    READING = "reading"        # Reading the request line and headers
    PROCESSING = "processing"  # Handler is running
    WRITING = "writing"        # Sending the response
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier for log lines.
        state: Current lifecycle state.
        created_at: Timestamp when the connection was accepted.
        timeout: Socket timeout for reads and writes.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    timeout: Optional[float] = 30.0

    _reader: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Seconds since accept."""
        return time.time() - self.created_at

    @property
    def reader(self) -> BinaryIO:
        """Buffered binary line reader over the socket."""
        if self._reader is None:
            self._reader = self.socket.makefile("rb")
        return self._reader

    # =========================================================================
    # READING / WRITING
    # =========================================================================

    def read_request(self, parser: RequestParser) -> HTTPRequest:
        """
        Read and decode the request line and headers.

        Raises:
            HTTPParseError: The request could not be decoded (incl. empty).
            OSError: The socket failed or timed out.
        """
        self.state = ConnectionState.READING
        request = parser.parse(self.reader, client_address=self.address)
        self.state = ConnectionState.PROCESSING
        return request

    def send_response(self, data: bytes) -> bool:
        """
        Send the full response with sendall().

        Returns:
            True if sent, False if the client went away.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection: shutdown(SHUT_WR) sends our FIN so the client
        sees end-of-stream after the body, then the descriptor is released.
        """
        if self.state == ConnectionState.CLOSED:
            return

        if self._reader is not None:
            try:
                self._reader.close()
            except OSError:
                pass

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
