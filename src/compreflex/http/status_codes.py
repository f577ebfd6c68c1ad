"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The subset of RFC 7231 status codes that the backend and facade can emit.

=============================================================================
WHICH CODES, AND WHEN
=============================================================================

    ┌────────┬──────────────────────────────────────────────────────────────┐
    │  Code  │ Emitted when                                                 │
    ├────────┼──────────────────────────────────────────────────────────────┤
    │  200   │ Command executed (even if the command itself failed!)        │
    │  400   │ Missing 'comando' parameter, or unreadable request line      │
    │  404   │ Path is not one of the known endpoints                       │
    │  431   │ Header section larger than max_request_size                  │
    │  500   │ Facade could not reach the backend / handler crashed         │
    │  503   │ Worker queue full, connection rejected                       │
    └────────┴──────────────────────────────────────────────────────────────┘

Engine-level failures (unknown class, wrong arity, bad value...) are NOT
mapped to HTTP errors. They travel as 200 with {"error": "..."} so the
browser client always gets parseable JSON.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes with their reason phrases.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200

    BAD_REQUEST = 400
    NOT_FOUND = 404
    REQUEST_HEADER_FIELDS_TOO_LARGE = 431

    INTERNAL_SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503

    @property
    def phrase(self) -> str:
        """Reason phrase used on the status line ("HTTP/1.1 404 Not Found")."""
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.REQUEST_HEADER_FIELDS_TOO_LARGE: "Request Header Fields Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
}
