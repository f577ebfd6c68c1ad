"""
=============================================================================
URL ROUTER
=============================================================================

Maps request paths to handler functions.

Each server exposes one or two fixed endpoints, so routing is an exact
path lookup. Anything else gets a 404 carrying a hint about which paths
DO exist:

        GET /compreflex?comando=...   → handle_command
        GET /anything-else            → 404 {"error":"Use /compreflex"}

The method is not part of the match: any verb reaching a known path is
answered, and the browser client only ever sends GET.

=============================================================================
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
import logging

from .request import HTTPRequest
from .response import HTTPResponse, not_found


logger = logging.getLogger(__name__)

# A handler takes the decoded request and returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass(frozen=True)
class Route:
    """A registered path and the handler serving it."""

    path: str
    handler: Handler
    name: Optional[str] = None


class Router:
    """
    Exact-path request router.

        router = Router(not_found_message="Use /compreflex")

        @router.route("/compreflex")
        def compreflex(request):
            return ok_json(engine.execute(request.get_query("comando")))

        response = router.handle(request)
    """

    def __init__(self, not_found_message: str = "Not Found"):
        """
        Args:
            not_found_message: Error text for unmatched paths.
        """
        self.not_found_message = not_found_message
        self._routes: Dict[str, Route] = {}

    def add_route(self, path: str, handler: Handler, name: Optional[str] = None) -> Route:
        """
        Register a handler for an exact path.

        Registering the same path twice replaces the first handler.
        """
        route = Route(path=path, handler=handler, name=name or handler.__name__)
        if path in self._routes:
            logger.warning(f"Route {path} registered twice, replacing {self._routes[path].name}")
        self._routes[path] = route
        return route

    def route(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """
        Decorator form of add_route().

        Returns the handler unchanged so decorators can be stacked.
        """
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, name)
            return handler
        return decorator

    def match(self, path: str) -> Optional[Route]:
        return self._routes.get(path)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """Dispatch to the matching handler, or answer 404."""
        route = self.match(request.path)
        if route is None:
            return not_found(self.not_found_message)
        return route.handler(request)

    def routes(self) -> List[Route]:
        """Registered routes in registration order."""
        return list(self._routes.values())
