"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the layers together. Both the backend and the facade are an HTTPServer
with a different Router:

    ┌──────────────┐  Connection   ┌────────────┐  task   ┌──────────────┐
    │ SocketServer │ ────────────► │ WorkerPool │ ──────► │ worker thread│
    │ accept loop  │   (full? 503) │  (queue)   │         └──────┬───────┘
    └──────────────┘               └────────────┘                │
                                                                 ▼
                          ┌─────────────────────────────────────────────┐
                          │ _process_connection(conn)                    │
                          │                                              │
                          │   RequestParser.parse(conn.reader)           │
                          │        │ HTTPParseError → error response     │
                          │        ▼                                     │
                          │   middleware(router.handle)(request)         │
                          │        │ exception → 500, traceback logged   │
                          │        ▼                                     │
                          │   conn.send_response(response.to_bytes())    │
                          │        ▼                                     │
                          │   conn.close()          (always, via with)   │
                          └─────────────────────────────────────────────┘

One request per connection: no keep-alive, no request bodies.

=============================================================================
"""

import logging
from typing import Callable, Optional, Tuple

from .config import ServerConfig
from .core import Connection, SocketServer, WorkerPool
from .http import (
    HTTPRequest,
    HTTPResponse,
    HTTPParseError,
    HTTPStatus,
    MalformedRequest,
    RequestParser,
    Router,
)
from .http.response import error_response, internal_error
from .middleware import Middleware, MiddlewarePipeline


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Minimal HTTP/1.1 server.

    Usage:
        router = Router(not_found_message="Use /hello")

        @router.route("/hello")
        def hello(request):
            return ok_text("hi")

        server = HTTPServer(ServerConfig(port=8080), router)
        server.use(LoggingMiddleware())
        server.run()   # Blocks until Ctrl+C / SIGTERM / shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._worker_pool = WorkerPool(
            workers=self.config.workers,
            queue_size=self.config.queue_size,
        )
        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._router = router or Router()
        self._middleware = MiddlewarePipeline()
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

    def use(self, middleware: Middleware) -> "HTTPServer":
        """Add middleware; the first added is the outermost."""
        self._middleware.add(middleware)
        return self

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        return self._socket_server.address

    @property
    def url(self) -> str:
        host, port = self.address
        return f"http://{host}:{port}"

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """Run one request through middleware and router, without a socket."""
        if self._handler is None:
            self._handler = self._middleware.wrap(self._router.handle)
        return self._handler(request)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self):
        """Start serving. Blocks until shutdown."""
        self._setup_logging()
        self._handler = self._middleware.wrap(self._router.handle)
        self._worker_pool.start()

        for route in self._router.routes():
            logger.info(f"Route {route.path} → {route.name}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Ask a running server to stop. Safe from any thread."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("compreflex").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._worker_pool.shutdown(wait=True, timeout=self.config.timeout or 30.0)
        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Called by the accept loop: queue the connection for a worker."""
        if not self._worker_pool.submit(self._process_connection, conn):
            logger.warning(f"[{conn.id}] Worker queue full, rejecting connection")
            with conn:
                self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE, "Server overloaded")

    def _process_connection(self, conn: Connection):
        """Serve exactly one request on conn (runs in a worker thread)."""
        with conn:
            try:
                request = conn.read_request(self._parser)
            except MalformedRequest as e:
                # Nothing was sent (a port probe or an aborted client): just close
                logger.debug(f"[{conn.id}] {e} from {conn.client_ip}")
                return
            except HTTPParseError as e:
                logger.info(f"[{conn.id}] Bad request from {conn.client_ip}: {e}")
                self._send_error(conn, e.status_code, str(e))
                return
            except OSError as e:
                logger.info(f"[{conn.id}] Read failed: {e}")
                return

            try:
                response = self.handle(request)
            except Exception as e:
                logger.exception(f"[{conn.id}] Handler error: {e}")
                response = internal_error("Internal Server Error")

            conn.send_response(response.to_bytes())

    def _send_error(self, conn: Connection, status: int, message: str):
        """Answer a request that never reached the router."""
        conn.send_response(error_response(status, message).to_bytes())
