"""
=============================================================================
COMPREFLEX - Reflective Command Gateway
=============================================================================

Runs introspection and static-method commands sent over HTTP:

    browser ──/consulta──► facade ──/compreflex──► backend ──► ReflectiveEngine
                                                                 │
    {"value":3} ◄──────────────────────────────────────────────────┘

    Class(collections.OrderedDict)
    invoke(time, time)
    unaryInvoke(builtins, abs, int, -3)
    binaryInvoke(math, pow, double, 2, double, 10)

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    compreflex/
    ├── __main__.py          # CLI: python -m compreflex {backend,facade}
    ├── server.py            # HTTPServer: accept → worker → route → respond
    ├── config.py            # ServerConfig / BackendConfig / FacadeConfig
    ├── core/                # Sockets, connections, worker threads
    ├── http/                # Request parsing, responses, routing
    ├── middleware/          # Access logging pipeline
    ├── reflection/          # Command grammar, TypeCatalog, engine
    └── apps/                # Backend, facade, proxy, client page

=============================================================================
QUICK START
=============================================================================

    from compreflex import ReflectiveEngine, create_backend, BackendConfig

    ReflectiveEngine().execute("unaryInvoke(builtins, abs, int, -3)")
    # '{"value":3}'

    create_backend(BackendConfig(allowed_types=("math",))).run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig, BackendConfig, FacadeConfig
from .reflection import ReflectiveEngine, InspectCatalog, TypeCatalog
from .server import HTTPServer
from .apps import create_backend, create_facade

__all__ = [
    "__version__",
    "ServerConfig",
    "BackendConfig",
    "FacadeConfig",
    "ReflectiveEngine",
    "InspectCatalog",
    "TypeCatalog",
    "HTTPServer",
    "create_backend",
    "create_facade",
]
