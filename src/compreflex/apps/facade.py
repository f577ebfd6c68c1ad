"""
=============================================================================
FACADE
=============================================================================

The server a browser talks to. It never runs commands itself.

    GET /cliente                  → 200 text/html client page
    GET /consulta?comando=<cmd>   → forwarded to <backend>/compreflex
                                    → 200 with the backend's body, verbatim
                                    → 500 {"error":"..."} if the backend is unreachable
                                    → 400 {"error":"Missing 'comando'"} if cmd is absent
    GET <any other path>          → 404 {"error":"Use /cliente or /consulta"}

    ┌─────────┐  /consulta   ┌────────┐  /compreflex   ┌─────────┐
    │ browser │ ───────────► │ facade │ ─────────────► │ backend │
    │         │ ◄─────────── │        │ ◄───────────── │         │
    └─────────┘  same body   └────────┘  JSON body     └─────────┘

=============================================================================
"""

from typing import Optional
import logging

from ..config import FacadeConfig
from ..http import HTTPRequest, HTTPResponse, Router, bad_request, internal_error, ok_html, ok_json
from ..middleware import LoggingMiddleware
from ..server import HTTPServer
from .backend import COMMAND_PARAM, MISSING_COMMAND
from .client_page import CLIENT_PAGE
from .proxy import ProxyError, ProxyForwarder


logger = logging.getLogger(__name__)

CLIENT_ENDPOINT = "/cliente"
QUERY_ENDPOINT = "/consulta"


def serve_client_page(request: HTTPRequest) -> HTTPResponse:
    return ok_html(CLIENT_PAGE)


def make_query_handler(forwarder: ProxyForwarder):
    """Handler for /consulta relaying to the backend through forwarder."""

    def handle_query(request: HTTPRequest) -> HTTPResponse:
        command = request.get_query(COMMAND_PARAM)
        if not command:
            return bad_request(MISSING_COMMAND)
        try:
            body = forwarder.forward(command)
        except ProxyError as e:
            return internal_error(str(e))
        return ok_json(body)

    return handle_query


def create_facade_router(forwarder: ProxyForwarder) -> Router:
    router = Router(not_found_message=f"Use {CLIENT_ENDPOINT} or {QUERY_ENDPOINT}")
    router.add_route(CLIENT_ENDPOINT, serve_client_page)
    router.add_route(QUERY_ENDPOINT, make_query_handler(forwarder))
    return router


def create_facade(
    config: Optional[FacadeConfig] = None,
    forwarder: Optional[ProxyForwarder] = None,
) -> HTTPServer:
    """
    Build (but don't start) the facade server.

    Args:
        config: Facade settings; defaults listen on 127.0.0.1:35000 and
                forward to http://localhost:45000.
        forwarder: Outbound client; built from config when omitted.
    """
    config = config or FacadeConfig()
    if forwarder is None:
        forwarder = ProxyForwarder(config.backend_url, timeout=config.backend_timeout)
    logger.info(f"Forwarding {QUERY_ENDPOINT} to {forwarder.backend_url}")

    server = HTTPServer(config, create_facade_router(forwarder))
    server.use(LoggingMiddleware(log_format=config.log_format))
    return server
