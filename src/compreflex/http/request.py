"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Decodes the request line and headers of a minimal HTTP/1.1 GET request,
read line by line from a socket stream, into an immutable HTTPRequest.

=============================================================================
WHAT A REQUEST LOOKS LIKE HERE
=============================================================================

Both servers only ever receive GET requests with all their data in the
query string:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │  GET /compreflex?comando=invoke(builtins.dict%2C%20fromkeys) HTTP/1.1│
    │  ─┬─ ─────┬───── ─────────────────────┬───────────────────── ───┬─── │
    │   │       │                           │                         │    │
    │ Method   Path                   Query string                 Version │
    │                                                                      │
    │  Host: localhost:45000\r\n                                           │
    │  User-Agent: Mozilla/5.0\r\n           ◄── headers, "Name: Value"    │
    │  \r\n                                  ◄── blank line = end          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

No body is read: the protocol is GET-only, and the connection is closed
after one response, so there is nothing after the blank line we care about.

=============================================================================
LENIENT PARSING RULES
=============================================================================

1. REQUEST LINE: split on single spaces.
   - "GET"             → method GET, path "/"
   - "" (empty/EOF)    → MalformedRequest (nothing to answer)

2. QUERY STRING: split at the FIRST '?', then on '&', then on the first '='.
   - Keys and values are percent-decoded ('+' is a space)
   - "flag"            → {"flag": ""}
   - "a=1&a=2"         → {"a": "2"}     (last write wins)

3. HEADERS: split at the first ':', both sides trimmed.
   - Lines without a colon are skipped silently
   - Header names keep the case the client sent

=============================================================================
"""

from dataclasses import dataclass, field
from typing import BinaryIO, Dict, Optional
from urllib.parse import unquote_plus
import io


class HTTPParseError(Exception):
    """
    Raised when an HTTP request cannot be decoded.

    Carries the HTTP status code the connection handler should answer with
    before closing the socket.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class MalformedRequest(HTTPParseError):
    """The stream ended (or was blank) before a request line was read."""


@dataclass(frozen=True)
class HTTPRequest:
    """
    A decoded HTTP request.

    Built once per connection by RequestParser and never mutated afterward
    (frozen dataclass).

    Attributes:
        method:           "GET" in practice; defaults to GET when missing
        path:             Path WITHOUT the query string ("/compreflex")
        raw_query_string: Query string as received, without the '?'
        query_params:     Decoded key → decoded value (last write wins)
        headers:          Header name → value, name case as received
        client_address:   (ip, port) of the peer, for logging
    """

    method: str
    path: str
    raw_query_string: str = ""
    query_params: Dict[str, str] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    client_address: tuple[str, int] = ("", 0)

    @property
    def user_agent(self) -> str:
        return self.get_header("User-Agent")

    def get_query(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get a decoded query parameter.

        Example:
            # URL: /consulta?comando=Class(math)
            request.get_query("comando")  # "Class(math)"
        """
        return self.query_params.get(name, default)

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value, ignoring the case of the name.

        Headers are stored as received, so the lookup scans them. There are
        only a handful per request.
        """
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default


class RequestParser:
    """
    Reads one request (line + headers) from a binary line stream.

    ==========================================================================
    PARSER FLOW
    ==========================================================================

        socket.makefile("rb")
              │
              ▼
        ┌───────────────────────────────────────────────────────────────────┐
        │  1. readline() → request line                                     │
        │     │  EOF / blank? → MalformedRequest                            │
        │     ▼                                                             │
        │  2. split(" ") → method, target (defaults GET, "/")               │
        │     ▼                                                             │
        │  3. target.partition("?") → path, raw query                       │
        │     ▼                                                             │
        │  4. readline() until blank line or EOF → headers                  │
        │     │  total > max_request_size? → HTTPParseError(431)            │
        │     ▼                                                             │
        │  5. HTTPRequest(...)                                              │
        └───────────────────────────────────────────────────────────────────┘

    ==========================================================================
    """

    def __init__(self, max_request_size: int = 64 * 1024):
        """
        Args:
            max_request_size: Upper bound, in bytes, for the request line
                              plus headers. Nothing legitimate comes close;
                              the limit stops a client from streaming an
                              endless header section into memory.
        """
        self.max_request_size = max_request_size

    def parse(
        self,
        stream: BinaryIO,
        client_address: tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Decode a request from a binary stream.

        Args:
            stream: Anything with readline(limit) returning bytes, usually
                    socket.makefile("rb").
            client_address: Peer (ip, port) stored on the request.

        Returns:
            The decoded HTTPRequest.

        Raises:
            MalformedRequest: Stream ended before a request line.
            HTTPParseError: Header section too large.
        """
        request_line, consumed = self._read_line(stream, 0)
        if not request_line:
            raise MalformedRequest("Empty request")

        method, path, query = self._parse_request_line(request_line)

        headers: Dict[str, str] = {}
        while True:
            line, consumed = self._read_line(stream, consumed)
            if not line:
                # Blank line ends the headers; so does EOF
                break
            parsed = parse_header_line(line)
            if parsed is not None:
                headers[parsed[0]] = parsed[1]

        return HTTPRequest(
            method=method,
            path=path,
            raw_query_string=query,
            query_params=parse_query_string(query),
            headers=headers,
            client_address=client_address,
        )

    def _read_line(self, stream: BinaryIO, consumed: int) -> tuple[str, int]:
        """
        Read one line and strip the CRLF.

        Returns the line and the running byte count for the size check.
        """
        remaining = self.max_request_size - consumed
        raw = stream.readline(remaining + 1)
        consumed += len(raw)
        if consumed > self.max_request_size:
            raise HTTPParseError(
                f"Request header section exceeds {self.max_request_size} bytes",
                status_code=431,
            )
        return raw.decode("utf-8", errors="replace").rstrip("\r\n"), consumed

    @staticmethod
    def _parse_request_line(line: str) -> tuple[str, str, str]:
        """
        Split "METHOD TARGET VERSION" on single spaces.

        Returns:
            (method, path, raw_query_string)
        """
        parts = line.split(" ")
        method = parts[0] or "GET"
        target = parts[1] if len(parts) > 1 and parts[1] else "/"

        # Only the first '?' separates path from query
        path, _, query = target.partition("?")
        return method, path, query


def parse_query_string(query: str) -> Dict[str, str]:
    """
    Decode "a=1&b=two%20words&flag" into a dict.

    Both keys and values are percent-decoded with unquote_plus, so a
    browser's '+' for space is honoured. Duplicate keys: last one wins.
    """
    params: Dict[str, str] = {}
    if not query:
        return params

    for pair in query.split("&"):
        if not pair:
            continue
        key, sep, value = pair.partition("=")
        if sep:
            params[unquote_plus(key)] = unquote_plus(value)
        else:
            params[unquote_plus(pair)] = ""
    return params


def parse_header_line(line: str) -> Optional[tuple[str, str]]:
    """
    Split "Name: Value" at the first colon.

    Returns None for lines with no name before a colon; callers skip them.
    Used for both request headers and the facade's backend response headers.
    """
    name, sep, value = line.partition(":")
    name = name.strip()
    if not sep or not name:
        return None
    return name, value.strip()


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
    max_size: int = 64 * 1024,
) -> HTTPRequest:
    """
    Parse a request held in memory.

    Convenience wrapper around RequestParser for tests and tools that
    already have the raw bytes.
    """
    return RequestParser(max_request_size=max_size).parse(io.BytesIO(data), client_address)
