"""
The two runnable servers.

    backend.py      /compreflex → ReflectiveEngine
    facade.py       /cliente page + /consulta proxy
    proxy.py        raw-socket client the facade uses to reach the backend
    client_page.py  the browser client's HTML
"""

from .backend import create_backend
from .facade import create_facade
from .proxy import ProxyError, ProxyForwarder

__all__ = [
    "create_backend",
    "create_facade",
    "ProxyError",
    "ProxyForwarder",
]
