"""
=============================================================================
BACKEND
=============================================================================

The server that actually runs commands.

    GET /compreflex?comando=<command>
        │
        ├── comando missing or empty  → 400 {"error":"Missing 'comando'"}
        │
        └── ReflectiveEngine.execute(comando)
                → 200 {"value": ...}  or  200 {"error": "..."}

    GET <any other path>              → 404 {"error":"Use /compreflex"}

Engine failures are answered with 200: the request was served, the command
failed. HTTP errors are kept for requests that never reached the engine.

=============================================================================
"""

from typing import Optional
import logging

from ..config import BackendConfig
from ..http import HTTPRequest, HTTPResponse, Router, bad_request, ok_json
from ..middleware import LoggingMiddleware
from ..reflection import InspectCatalog, ReflectiveEngine
from ..server import HTTPServer


logger = logging.getLogger(__name__)

ENDPOINT = "/compreflex"
COMMAND_PARAM = "comando"
MISSING_COMMAND = f"Missing '{COMMAND_PARAM}'"


def make_command_handler(engine: ReflectiveEngine):
    """Handler for /compreflex bound to engine."""

    def handle_command(request: HTTPRequest) -> HTTPResponse:
        command = request.get_query(COMMAND_PARAM)
        if not command:
            return bad_request(MISSING_COMMAND)
        return ok_json(engine.execute(command))

    return handle_command


def create_backend_router(engine: ReflectiveEngine) -> Router:
    router = Router(not_found_message=f"Use {ENDPOINT}")
    router.add_route(ENDPOINT, make_command_handler(engine))
    return router


def create_backend(
    config: Optional[BackendConfig] = None,
    engine: Optional[ReflectiveEngine] = None,
) -> HTTPServer:
    """
    Build (but don't start) the backend server.

    Args:
        config: Backend settings; defaults listen on 127.0.0.1:45000.
        engine: Engine to run commands with; by default one over an
                InspectCatalog restricted to config.allowed_types.
    """
    config = config or BackendConfig()
    if engine is None:
        if config.allowed_types is None:
            logger.warning(
                "No allowed types configured: any caller can import modules and run "
                "static functions (builtins.eval included) in this process"
            )
        else:
            logger.info(f"Allowed types: {', '.join(config.allowed_types)}")
        engine = ReflectiveEngine(InspectCatalog(allowed_types=config.allowed_types))

    server = HTTPServer(config, create_backend_router(engine))
    server.use(LoggingMiddleware(log_format=config.log_format))
    return server
