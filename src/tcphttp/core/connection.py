"""
=============================================================================
CONNECTION SESSION
=============================================================================

A ConnectionSession owns one accepted connection from the first byte to
the close. It answers exactly one request: decode, route, encode, write,
close.

=============================================================================
ONE READ, ONE REQUEST
=============================================================================

TCP is a byte stream and makes no promise that a request arrives in one
piece. This server does not try to reassemble: the first chunk the
transport delivers IS the request. That keeps the session trivial and is
good enough for the small requests it is built for (curl, browsers, form
posts), which almost always fit in a single segment.

Consequences worth knowing:

    - A request split across reads is answered from its first fragment.
    - Data that arrives after the first chunk is ignored.
    - A connection that never sends anything stays open until the peer
      hangs up or the server shuts down. There is no idle timeout.

=============================================================================
SESSION STATE MACHINE
=============================================================================

    AWAITING_DATA ──on_data──► DISPATCHING ──► RESPONDED ──► CLOSED
          │                         │               │
          │                         │ (write fails) │
          └──on_error──► ERRORED ◄──┴───────────────┘
          │                 │
          └──on_end─────────┴──────────────────────────────► CLOSED

    AWAITING_DATA   Accepted, nothing received yet.
    DISPATCHING     Decoding the bytes and running the handler.
    RESPONDED       Response chosen; encoder writes it and closes.
    ERRORED         Transport reported a fault; nothing more is written.
    CLOSED          Transport released. Terminal.

The session never touches a socket directly. It talks to a Transport with
two methods, sendall() and close(), so tests drive every transition with an
in-memory fake.

=============================================================================
INTERVIEW QUESTIONS ABOUT CONNECTION HANDLING
=============================================================================

Q: "What happens when a handler raises?"
A: "The session catches it, logs the traceback, and sends a 500. The
   failure stays inside that one connection; the listener and every
   other session keep running."

Q: "Why close after every response?"
A: "Without keep-alive there is no need to find where the next request
   starts. Closing also tells the client the body is complete, on top
   of the Content-Length header."

=============================================================================
"""

import logging
import socket
import time
import uuid
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional

from ..http.request import HTTPParseError, HTTPRequest, RequestParser
from ..http.response import HTTPResponse, encode_response, error_response, internal_error
from ..http.router import Router
from .access_log import AccessLogEntry, log_access, timestamp_now


logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle states of a ConnectionSession."""

    AWAITING_DATA = "awaiting_data"
    DISPATCHING = "dispatching"
    RESPONDED = "responded"
    ERRORED = "errored"
    CLOSED = "closed"


class Transport(ABC):
    """The two operations a session needs from a connection."""

    @abstractmethod
    def sendall(self, data: bytes) -> None:
        """Write all of ``data`` or raise OSError."""

    @abstractmethod
    def close(self) -> None:
        """Release the connection. Must be safe to call more than once."""


class SocketTransport(Transport):
    """
    Transport over an accepted, non-blocking TCP socket.

    The event loop keeps client sockets non-blocking so a quiet client can
    never stall it. Writing is the one place we wait: sendall() switches
    the socket to a bounded timeout so a large response still goes out in
    full.
    """

    def __init__(
        self,
        sock: socket.socket,
        on_close: Optional[Callable[[socket.socket], None]] = None,
        write_timeout: float = 5.0,
    ):
        """
        Args:
            sock: The accepted client socket.
            on_close: Called with the socket just before it is closed.
                      The event loop uses this to unregister it.
            write_timeout: Longest time sendall() may wait on a full buffer.
        """
        self.socket = sock
        self._on_close = on_close
        self._write_timeout = write_timeout
        self._closed = False

    def sendall(self, data: bytes) -> None:
        self.socket.settimeout(self._write_timeout)
        self.socket.sendall(data)

    def close(self) -> None:
        """
        Close gracefully: send FIN with shutdown(SHUT_WR), then release
        the file descriptor.
        """
        if self._closed:
            return
        self._closed = True

        if self._on_close is not None:
            self._on_close(self.socket)

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        self.socket.close()


class ConnectionSession:
    """
    Per-connection state machine for a single request/response exchange.

    Usage (what the event loop does):
        session = ConnectionSession(transport, router, address=addr)
        session.on_data(chunk)   # decode, route, write, close
        session.state            # SessionState.CLOSED

    Attributes:
        id: Short random identifier used to prefix log lines.
        state: Current SessionState.
        request: The decoded request, once there is one.
        response: The response chosen for the request, once there is one.
        error: The transport error that ended the session, if any.
    """

    def __init__(
        self,
        transport: Transport,
        router: Router,
        parser: Optional[RequestParser] = None,
        address: tuple[str, int] = ("", 0),
        log_format: str = "text",
    ):
        self.transport = transport
        self.router = router
        self.parser = parser or RequestParser()
        self.address = address
        self.log_format = log_format

        self.id = str(uuid.uuid4())[:8]
        self.state = SessionState.AWAITING_DATA
        self.created_at = time.time()

        self.request: Optional[HTTPRequest] = None
        self.response: Optional[HTTPResponse] = None
        self.error: Optional[BaseException] = None

    @property
    def is_closed(self) -> bool:
        return self.state is SessionState.CLOSED

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # TRANSPORT EVENTS
    # =========================================================================

    def on_data(self, data: bytes) -> None:
        """
        Handle a chunk of inbound data.

        Only the first chunk is processed. It is decoded, routed and
        answered, and the connection is closed before this returns.
        """
        if self.state is not SessionState.AWAITING_DATA:
            logger.debug(
                f"[{self.id}] Ignoring {len(data)} bytes received in state "
                f"{self.state.value}"
            )
            return

        self.state = SessionState.DISPATCHING
        started = time.time()

        response = self._dispatch(data)

        self.state = SessionState.RESPONDED
        self._respond(response, started)

    def on_error(self, exc: BaseException) -> None:
        """Transport fault: log it, then abandon the connection."""
        if self.is_closed:
            return

        self.error = exc
        logger.warning(f"[{self.id}] Socket error from {self.client_ip}: {exc}")
        self.state = SessionState.ERRORED
        self.close()

    def on_end(self) -> None:
        """Peer closed its side before we answered."""
        if self.is_closed:
            return

        logger.debug(f"[{self.id}] Connection ended by {self.client_ip}")
        self.close()

    def close(self) -> None:
        """Release the transport. Idempotent."""
        if self.is_closed:
            return

        try:
            self.transport.close()
        except OSError as e:
            logger.debug(f"[{self.id}] Error while closing transport: {e}")

        self.state = SessionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.2f}ms")

    # =========================================================================
    # DISPATCH AND RESPONSE
    # =========================================================================

    def _dispatch(self, data: bytes) -> HTTPResponse:
        """
        Decode and route ``data``, turning every failure into a response.

            HTTPParseError    → 400 / 413 default response
            handler exception → 500 default response
        """
        try:
            self.request = self.parser.parse(data, self.address)
        except HTTPParseError as e:
            logger.warning(f"[{self.id}] Rejected request from {self.client_ip}: {e}")
            return error_response(e.status_code)

        try:
            response = self.router.handle(self.request)
        except Exception as e:
            logger.exception(
                f"[{self.id}] Handler error for {self.request.method} "
                f"{self.request.path}: {e}"
            )
            return internal_error()

        if not isinstance(response, HTTPResponse):
            logger.error(
                f"[{self.id}] Handler for {self.request.method} {self.request.path} "
                f"returned {type(response).__name__}, not HTTPResponse"
            )
            return internal_error()

        return response

    def _respond(self, response: HTTPResponse, started: float) -> None:
        """
        Encode and write ``response``, then close.

        A response that cannot be encoded (body not a str, status that is
        not a number) is replaced by the default 500.
        """
        try:
            payload = encode_response(response)
        except Exception as e:
            logger.exception(f"[{self.id}] Could not encode response {response!r}: {e}")
            response = internal_error()
            payload = encode_response(response)

        self.response = response

        try:
            self.transport.sendall(payload)
        except OSError as e:
            self.on_error(e)
            return

        self._log_access(response, started)
        self.close()

    def _log_access(self, response: HTTPResponse, started: float) -> None:
        request = self.request
        entry = AccessLogEntry(
            connection_id=self.id,
            method=request.method if request else "-",
            path=request.path if request else "-",
            client_ip=self.client_ip,
            user_agent=(request.user_agent if request else "") or "-",
            status_code=response.status_code,
            content_length=len(response.body_bytes),
            duration_ms=(time.time() - started) * 1000,
            timestamp=timestamp_now(),
        )
        log_access(entry, self.log_format)
