"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

The layer between the operating system's sockets and the HTTP logic.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  socket_server.py   SocketServer                                    │
    │                     Listening socket + selectors event loop.        │
    │                     Turns readiness into on_data / on_end /         │
    │                     on_error calls.                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │  connection.py      ConnectionSession, SessionState                 │
    │                     One request/response exchange per connection.   │
    │                     Transport, SocketTransport                      │
    │                     What a session needs from a socket.             │
    ├─────────────────────────────────────────────────────────────────────┤
    │  access_log.py      AccessLogEntry                                  │
    │                     One log line per answered request.              │
    └─────────────────────────────────────────────────────────────────────┘

    SocketServer ──accept──► SocketTransport ──► ConnectionSession
                 ──recv────► session.on_data(chunk)
                                   │
                                   └──► decode ─► route ─► encode ─► close

=============================================================================
"""

from .access_log import AccessLogEntry
from .connection import ConnectionSession, SessionState, SocketTransport, Transport
from .socket_server import SocketServer


__all__ = [
    "AccessLogEntry",
    "ConnectionSession",
    "SessionState",
    "SocketTransport",
    "Transport",
    "SocketServer",
]
