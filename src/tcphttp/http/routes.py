"""
=============================================================================
ROUTE TABLE
=============================================================================

Maps an exact (METHOD, path) pair to the handler that answers it.

    ┌──────────────────────────────┬──────────────────────┐
    │  Key                         │  Handler             │
    ├──────────────────────────────┼──────────────────────┤
    │  ("GET",  "/")               │  home                │
    │  ("GET",  "/about")          │  about               │
    │  ("POST", "/submit")         │  submit              │
    └──────────────────────────────┴──────────────────────┘

Matching rules:

    - Method is compared case-insensitively (stored upper-cased).
    - Path is compared byte-for-byte. "/about" != "/about/" != "/About".
    - No wildcards, prefixes or ":param" segments.
    - Registering the same key twice keeps the LAST handler.

=============================================================================
READ-ONLY AFTER STARTUP
=============================================================================

Routes are registered while the application is being assembled. Once the
server starts accepting connections the table is frozen:

    table.register("GET", "/", home)     # fine
    table.freeze()
    table.register("GET", "/x", other)   # RouteTableFrozenError

Because nothing can write to a frozen table, every connection can read it
without locks.

=============================================================================
"""

from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from .request import HTTPRequest
from .response import HTTPResponse


Handler = Callable[[HTTPRequest], HTTPResponse]
RouteKey = Tuple[str, str]


class RouteTableFrozenError(RuntimeError):
    """Raised when registering a route after the table was frozen."""


class RouteTable:
    """(METHOD, path) → handler mapping, frozen once the server starts."""

    def __init__(self):
        self._handlers: Dict[RouteKey, Handler] = {}
        self._frozen = False

    @staticmethod
    def _key(method: str, path: str) -> RouteKey:
        return (method.upper(), path)

    def register(self, method: str, path: str, handler: Handler) -> None:
        """
        Store ``handler`` for (method, path).

        Args:
            method: HTTP method, any case.
            path: Exact request path.
            handler: Callable taking an HTTPRequest, returning an HTTPResponse.

        Raises:
            RouteTableFrozenError: If the table has been frozen.
        """
        if self._frozen:
            raise RouteTableFrozenError(
                f"Cannot register {method.upper()} {path}: route table is frozen"
            )
        self._handlers[self._key(method, path)] = handler

    def lookup(self, method: str, path: str) -> Optional[Handler]:
        """Return the handler for (method, path), or None when there is no route."""
        return self._handlers.get(self._key(method, path))

    def freeze(self) -> None:
        """Reject all further registrations. Calling it twice is harmless."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def entries(self) -> Mapping[RouteKey, Handler]:
        """Read-only view of the underlying mapping."""
        return MappingProxyType(self._handlers)

    def routes(self) -> List[RouteKey]:
        """Registered keys sorted by path, then method."""
        return sorted(self._handlers, key=lambda key: (key[1], key[0]))

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        method, path = key
        return self._key(method, path) in self._handlers
