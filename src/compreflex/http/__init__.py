"""
=============================================================================
HTTP PROTOCOL PACKAGE
=============================================================================

The minimal HTTP/1.1 message model both servers ride on:

    request.py       Request line + headers → HTTPRequest
    response.py      HTTPResponse → bytes, canned 200/400/404/500 builders
    router.py        Exact-path dispatch with a 404 fallback
    status_codes.py  The status codes the servers can emit

Wire format reminder:

    REQUEST                           RESPONSE
    ───────                           ────────
    GET /path?query HTTP/1.1\\r\\n      HTTP/1.1 200 OK\\r\\n
    Header: Value\\r\\n                 Header: Value\\r\\n
    \\r\\n                              \\r\\n
                                      [body]

=============================================================================
"""

from .request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    MalformedRequest,
    parse_request,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok_json,        # 200 JSON
    ok_text,        # 200 text/plain
    ok_html,        # 200 text/html
    bad_request,    # 400
    not_found,      # 404
    internal_error,  # 500
)
from .router import Router, Route
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "MalformedRequest",
    "parse_request",
    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ok_json",
    "ok_text",
    "ok_html",
    "bad_request",
    "not_found",
    "internal_error",
    # Routing
    "Router",
    "Route",
    # Status codes
    "HTTPStatus",
]
