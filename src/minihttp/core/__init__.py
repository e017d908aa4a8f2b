"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing underneath the HTTP layer.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Creates the TCP listening socket, binds, listens                 │
    │  • Runs the accept() loop                                           │
    │  • Stops on shutdown() or SIGTERM/SIGINT                            │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ One Connection per accept()
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Wraps a client socket as a buffered byte stream                  │
    │  • Sends exactly one response                                       │
    │  • Closes cleanly (FIN, drain, close)                               │
    └─────────────────────────────────────────────────────────────────────┘

Each Connection is served on its own thread by HTTPServer.

=============================================================================
"""

from .connection import Connection, ConnectionState
from .socket_server import SocketServer

__all__ = [
    "Connection",
    "ConnectionState",
    "SocketServer",
]
