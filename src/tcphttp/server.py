"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together: configuration, route registration, the event
loop and the per-connection sessions.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │   HTTPServer    │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────────┐   ┌──────────────┐      │
    │    │ SocketServer │    │ ConnectionSession│   │    Router    │      │
    │    │ (event loop) │───►│  (one per conn)  │──►│ (RouteTable) │      │
    │    └──────────────┘    └──────────────────┘   └──────────────┘      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
LIFECYCLE
=============================================================================

    1. SETUP       server = HTTPServer(config); register routes
    2. RUN         run() freezes the route table, configures logging,
                   binds the port and enters the event loop
    3. SERVE       each connection: one read, one response, close
    4. SHUTDOWN    Ctrl+C / SIGTERM / shutdown() stops the loop and
                   closes any connection still open

Routes registered after run() has started raise RouteTableFrozenError.

=============================================================================
"""

import logging
from typing import Optional

from .config import ServerConfig
from .core import ConnectionSession, SocketServer, Transport
from .http import Handler, RequestParser, Router, RouteTable


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    HTTP/1.1 server, one request per connection.

    Usage:
        server = HTTPServer(ServerConfig(port=3000))

        @server.get("/")
        def home(request):
            return ok("Welcome to the home page!")

        server.register_route("POST", "/submit", submit)

        server.run()   # Blocks until Ctrl+C
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Defaults are used when omitted.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._routes = RouteTable()
        self._router = Router(self._routes)

        self._running = False

    @property
    def router(self) -> Router:
        return self._router

    @property
    def routes(self) -> RouteTable:
        return self._routes

    @property
    def address(self):
        """(host, port) being served; the real port once bound."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def active_connections(self) -> int:
        """Client connections currently open."""
        return self._socket_server.active_connections

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def register_route(self, method: str, path: str, handler: Handler) -> Handler:
        """Register ``handler`` for the exact (method, path)."""
        return self._router.register_route(method, path, handler)

    def route(self, method: str, path: str):
        """Decorator: register a handler for (method, path)."""
        return self._router.route(method, path)

    def get(self, path: str):
        """Register a GET route."""
        return self._router.get(path)

    def post(self, path: str):
        """Register a POST route."""
        return self._router.post(path)

    def put(self, path: str):
        return self._router.put(path)

    def patch(self, path: str):
        return self._router.patch(path)

    def delete(self, path: str):
        return self._router.delete(path)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None, banner: bool = True):
        """
        Start serving (blocking).

        Args:
            host: Override config.host.
            port: Override config.port.
            banner: Print the startup banner and route list.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port
        self.config.validate()

        self._setup_logging()
        self._routes.freeze()
        self._running = True

        logger.info(f"Starting HTTP server on {self.config.host}:{self.config.port}")
        if banner:
            self._print_startup_banner()

        try:
            self._socket_server.start(self._open_session)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._running = False
            logger.info("Server stopped")

    def serve(self, host: Optional[str] = None, port: Optional[int] = None):
        """run() without the banner, for embedding and tests."""
        self.run(host=host, port=port, banner=False)

    def shutdown(self) -> None:
        """Stop the event loop. Safe to call from another thread."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_for_shutdown(timeout)

    def _open_session(self, transport: Transport, address) -> ConnectionSession:
        """SessionFactory handed to the SocketServer."""
        return ConnectionSession(
            transport,
            self._router,
            parser=self._parser,
            address=address,
            log_format=self.config.log_format,
        )

    def _print_startup_banner(self) -> None:
        host, port = self.config.host, self.config.port
        print()
        print("=" * 62)
        print(f"  tcphttp running on http://{host}:{port}")
        print("  Press Ctrl+C to stop")
        print("=" * 62)
        self._router.print_routes()

    def _setup_logging(self) -> None:
        """Configure logging from config.log_level."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("tcphttp").setLevel(level)


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Factory for HTTPServer instances.

        app = create_app(ServerConfig(port=8000))

        @app.get("/")
        def index(request):
            return ok("Hello!")

        app.run()
    """
    return HTTPServer(config)
