"""
=============================================================================
TCPHTTP - HTTP/1.1 Over Raw TCP Sockets
=============================================================================

A deliberately small HTTP/1.1 server: bytes in from a socket, a route
table lookup, bytes out, close. No HTTP library is involved at any point.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   socket read ──► RequestParser ──► Router ──► handler              │
    │                                       │           │                  │
    │                                   RouteTable   HTTPResponse          │
    │                                                   │                  │
    │   socket close ◄── sendall ◄── HTTPResponse.to_bytes()              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

What it does NOT do: keep-alive, pipelining, chunked encoding, TLS, or
reassembling a request that arrives across several reads.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    tcphttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m tcphttp)
    ├── server.py            # HTTPServer facade
    ├── config.py            # ServerConfig dataclass
    ├── core/
    │   ├── socket_server.py # selectors event loop
    │   ├── connection.py    # ConnectionSession state machine, transports
    │   └── access_log.py    # Access log records
    ├── http/
    │   ├── request.py       # Request decoder
    │   ├── form.py          # URL-encoded body decoder
    │   ├── routes.py        # Route table
    │   ├── router.py        # Dispatch
    │   ├── response.py      # Response encoder
    │   └── status_codes.py  # Status constants, reason phrase
    └── handlers/
        └── demo.py          # Demo application routes

=============================================================================
QUICK START
=============================================================================

    from tcphttp import HTTPServer, ServerConfig
    from tcphttp.http import ok, json_response, parse_body

    server = HTTPServer(ServerConfig(port=3000))

    @server.get("/")
    def home(request):
        return ok("Welcome to the home page!")

    @server.post("/submit")
    def submit(request):
        return json_response(parse_body(request.body), status_code=201)

    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, create_app
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
