"""
Middleware wrapped around a server's router.

    base.py      Middleware ABC and MiddlewarePipeline
    logging.py   LoggingMiddleware (access log on "compreflex.access")
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
]
