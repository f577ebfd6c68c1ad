"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Renders HTTP/1.1 responses to the bytes written back on the socket.

=============================================================================
RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │  HTTP/1.1 200 OK\r\n                      ◄── status line            │
    │  Content-Type: application/json; charset=UTF-8\r\n                   │
    │  Content-Length: 11\r\n                   ◄── UTF-8 BYTES of body    │
    │  Connection: close\r\n                    ◄── one request per socket │
    │  Access-Control-Allow-Origin: *\r\n       ◄── browser client on a    │
    │  \r\n                                         different port         │
    │  {"value":3}                              ◄── body                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Every response carries those four headers, in that order. Extra headers
(X-Request-ID from the access log, for instance) are appended after them.

=============================================================================
CONTENT-LENGTH IS COUNTED, NEVER TRUSTED
=============================================================================

    len("ñ")                  == 1     ← characters
    len("ñ".encode("utf-8"))  == 2     ← bytes on the wire

The client stops reading after Content-Length BYTES. Counting characters
truncates any non-ASCII body, so the header is recomputed from the encoded
body every time the response is serialised, whatever a caller set before.

=============================================================================
ERROR BODIES
=============================================================================

The canned 4xx/5xx builders always answer {"error": "..."} and replace any
double quote in the message with a single quote, so messages quoting user
input (Missing "comando") stay readable in the browser client.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import json

from .status_codes import HTTPStatus


JSON_CONTENT_TYPE = "application/json; charset=UTF-8"
TEXT_CONTENT_TYPE = "text/plain; charset=UTF-8"
HTML_CONTENT_TYPE = "text/html; charset=UTF-8"


@dataclass
class HTTPResponse:
    """
    An HTTP response ready to be rendered.

    Built once by a handler, rendered once by the connection handler.

        Handler returns          to_bytes()              Socket sends
        HTTPResponse    ─────►   serializes    ─────►    raw bytes
    """

    status: int = HTTPStatus.OK
    reason: str = ""
    content_type: str = TEXT_CONTENT_TYPE
    body: str = ""
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.reason:
            self.reason = _reason_for(self.status)

        # Mandatory headers go first; anything passed in follows them
        extra = self.headers
        self.headers = {
            "Content-Type": self.content_type,
            "Content-Length": str(self.content_length),
            "Connection": "close",
            "Access-Control-Allow-Origin": "*",
        }
        for name, value in extra.items():
            self.headers.setdefault(name, value)

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 404 Not Found"."""
        return f"HTTP/1.1 {int(self.status)} {self.reason}"

    @property
    def content_length(self) -> int:
        """Body length in UTF-8 bytes."""
        return len(self.body.encode("utf-8"))

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Add or replace a header. Returns self for chaining."""
        self.headers[name] = value
        return self

    def to_bytes(self) -> bytes:
        """
        Serialize for socket.sendall().

            HTTP/1.1 200 OK\\r\\n
            Name: Value\\r\\n        (insertion order)
            \\r\\n
            <UTF-8 body>
        """
        body = self.body.encode("utf-8")
        self.headers["Content-Length"] = str(len(body))

        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        return ("\r\n".join(lines) + "\r\n").encode("utf-8") + body


class ResponseBuilder:
    """
    Fluent builder for responses that the canned helpers don't cover.

        response = (ResponseBuilder()
            .status(HTTPStatus.SERVICE_UNAVAILABLE)
            .json({"error": "Server overloaded"})
            .build())

    Every method except build() returns self.
    """

    def __init__(self):
        self._status: int = HTTPStatus.OK
        self._reason: str = ""
        self._content_type = TEXT_CONTENT_TYPE
        self._body = ""
        self._headers: Dict[str, str] = {}

    def status(self, status: int, reason: str = "") -> "ResponseBuilder":
        """Set the status code; the reason defaults to the standard phrase."""
        self._status = status
        self._reason = reason
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def text(self, text: str, content_type: str = TEXT_CONTENT_TYPE) -> "ResponseBuilder":
        self._body = text
        self._content_type = content_type
        return self

    def html(self, html: str) -> "ResponseBuilder":
        return self.text(html, HTML_CONTENT_TYPE)

    def json(self, data: Any) -> "ResponseBuilder":
        """
        Serialize data as compact JSON.

        Compact separators keep bodies identical to what the engine emits:
        {"error":"..."} rather than {"error": "..."}.
        """
        return self.text(to_compact_json(data), JSON_CONTENT_TYPE)

    def raw_json(self, body: str) -> "ResponseBuilder":
        """Use an already-serialized JSON document as the body, untouched."""
        return self.text(body, JSON_CONTENT_TYPE)

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            reason=self._reason,
            content_type=self._content_type,
            body=self._body,
            headers=dict(self._headers),
        )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def to_compact_json(data: Any) -> str:
    """json.dumps without spaces after separators, non-ASCII kept as is."""
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def sanitize_message(message: Optional[str]) -> str:
    """Replace double quotes with single quotes for error bodies."""
    return (message or "").replace('"', "'")


def _reason_for(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown"


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
#     return ok_json(engine.execute(command))
#     return bad_request("Missing 'comando'")
#     return not_found("Use /compreflex")
#
# =============================================================================

def ok_json(body: str) -> HTTPResponse:
    """200 OK carrying an already-serialized JSON document."""
    return ResponseBuilder().raw_json(body).build()


def ok_text(body: str) -> HTTPResponse:
    """200 OK with a plain text body."""
    return ResponseBuilder().text(body).build()


def ok_html(body: str) -> HTTPResponse:
    """200 OK with an HTML page."""
    return ResponseBuilder().html(body).build()


def error_response(status: int, message: str) -> HTTPResponse:
    """
    Any error status with a {"error": "..."} body.

    Double quotes inside the message become single quotes before encoding.
    """
    return (ResponseBuilder()
        .status(status)
        .json({"error": sanitize_message(message)})
        .build())


def bad_request(message: str = "Bad Request") -> HTTPResponse:
    """400 Bad Request, e.g. a required query parameter is missing."""
    return error_response(HTTPStatus.BAD_REQUEST, message)


def not_found(message: str = "Not Found") -> HTTPResponse:
    """404 Not Found, for any path the router doesn't know."""
    return error_response(HTTPStatus.NOT_FOUND, message)


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    """500 Internal Server Error, e.g. the facade could not reach the backend."""
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, message)
