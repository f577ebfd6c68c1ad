"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing shared by the backend and the facade:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                               │
    │  • Listening TCP socket, accept() loop in the main thread           │
    │  • Graceful shutdown via SIGTERM / SIGINT or shutdown()             │
    └─────────────────────────────────────────────────────────────────────┘
                                    │ hands off each accepted socket
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          WORKER POOL                                │
    │  • Fixed number of daemon threads, bounded task queue               │
    │  • workers=1 serves connections strictly one at a time              │
    └─────────────────────────────────────────────────────────────────────┘
                                    │ one task per connection
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                 │
    │  • Buffered line reader over the client socket                      │
    │  • NEW → READING → PROCESSING → WRITING → CLOSED                    │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .worker_pool import WorkerPool

__all__ = [
    "SocketServer",     # TCP listener + accept loop
    "Connection",       # One client socket, one request
    "ConnectionState",  # Connection lifecycle states
    "WorkerPool",       # Threads serving connections
]
