"""
=============================================================================
MIDDLEWARE PIPELINE
=============================================================================

Cross-cutting request processing (access logging today) wrapped around a
router as a chain of responsibility:

    pipeline.add(LoggingMiddleware())    # first added = outermost

        ┌───────────────────────────────────────────┐
        │  LoggingMiddleware                        │
        │  ┌─────────────────────────────────────┐  │
        │  │        router.handle(request)       │  │
        │  └─────────────────────────────────────┘  │
        └───────────────────────────────────────────┘

Requests flow inward in the order the middleware was added; responses flow
back outward in reverse order.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)

# The next middleware, or the final handler
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Base class for middleware.

        class Timing(Middleware):
            def __call__(self, request, next):
                response = next(request)            # continue the chain
                response.set_header("X-Took", "1ms")
                return response

    Returning a response without calling next() short-circuits the chain.
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """Process the request, usually by delegating to next(request)."""

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """Ordered middleware, wrapped around a final handler by wrap()."""

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        for mw in middleware:
            self.add(mw)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Build the chain around handler.

        Given [MW1, MW2]: wrapping in reverse gives MW1(MW2(handler)), so
        the first-added middleware sees the request first.
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)
        return current

    @staticmethod
    def _create_wrapped_handler(middleware: Middleware, next_handler: NextHandler) -> NextHandler:
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)
        return wrapped
