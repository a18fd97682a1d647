"""
=============================================================================
ROUTER
=============================================================================

Dispatches a decoded request to the handler registered for its exact
(method, path), or answers 404.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        DISPATCH FLOW                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   HTTPRequest(method="get", path="/")                               │
    │        │                                                             │
    │        ▼                                                             │
    │   RouteTable.lookup("GET", "/")                                     │
    │        │                                                             │
    │        ├── handler found ──► handler(request) ──► HTTPResponse      │
    │        │                                                             │
    │        └── None ───────────► 404 text/plain "Not Found"             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A known path with the wrong method is NOT answered with 405: the router
cannot tell "no such path" from "no such method" and both give the same
404. Clients rely on that, so keep it.

Handler exceptions are not caught here. They travel up to the connection
session, which logs them and answers 500. Keeping the router free of error
handling means a test can call router.handle() and see the real exception.

=============================================================================
INTERVIEW QUESTIONS ABOUT ROUTING
=============================================================================

Q: "Why a dict lookup instead of iterating over a list of routes?"
A: "Exact matching only needs equality, and a dict keyed by
   (method, path) gives that in O(1). Pattern routers need to iterate
   (or build a trie) because one route can match many paths."

Q: "Why upper-case the method at both registration and lookup?"
A: "Methods are case-sensitive in the RFC, but clients and handler
   authors are sloppy. Normalising both sides makes 'get' and 'GET'
   hit the same route without touching the request object."

=============================================================================
"""

import logging
from typing import Callable, Optional

from .request import HTTPRequest
from .response import HTTPResponse, not_found
from .routes import Handler, RouteTable


logger = logging.getLogger(__name__)


class Router:
    """
    Request dispatcher with a decorator registration API.

    Usage:
        router = Router()

        @router.get("/")
        def home(request):
            return ok("Welcome to the home page!")

        router.register_route("POST", "/submit", submit)

        response = router.handle(request)
    """

    def __init__(self, table: Optional[RouteTable] = None):
        """
        Args:
            table: Route table to dispatch through. A fresh one is created
                   when omitted.
        """
        self.table = table if table is not None else RouteTable()

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def register_route(self, method: str, path: str, handler: Handler) -> Handler:
        """
        Register ``handler`` for (method, path).

        Returns the handler so this can back the decorators below.
        """
        self.table.register(method, path, handler)
        logger.debug(f"Registered route {method.upper()} {path}")
        return handler

    def route(self, method: str, path: str) -> Callable[[Handler], Handler]:
        """
        Decorator form of register_route().

            @router.route("PUT", "/profile")
            def update_profile(request):
                ...
        """
        def decorator(handler: Handler) -> Handler:
            return self.register_route(method, path, handler)
        return decorator

    def get(self, path: str) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route("GET", path)

    def post(self, path: str) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self.route("POST", path)

    def put(self, path: str) -> Callable[[Handler], Handler]:
        return self.route("PUT", path)

    def patch(self, path: str) -> Callable[[Handler], Handler]:
        return self.route("PATCH", path)

    def delete(self, path: str) -> Callable[[Handler], Handler]:
        return self.route("DELETE", path)

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def resolve(self, request: HTTPRequest) -> Optional[Handler]:
        """Find the handler for ``request`` without calling it."""
        return self.table.lookup(request.method.upper(), request.path)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route ``request`` and return the response.

        Args:
            request: Decoded request.

        Returns:
            The handler's response, or the default 404 response.

        Raises:
            Exception: Whatever the handler raises.
        """
        handler = self.resolve(request)
        if handler is None:
            logger.debug(f"No route for {request.method.upper()} {request.path}")
            return not_found()
        return handler(request)

    def print_routes(self) -> None:
        """
        Print the route table (used by the startup banner).

            Registered Routes:
            ------------------------------------------------------------
              GET      /
              POST     /submit
            ------------------------------------------------------------
        """
        print("\nRegistered Routes:")
        print("-" * 60)
        for method, path in self.table.routes():
            print(f"  {method:8} {path}")
        print("-" * 60)
