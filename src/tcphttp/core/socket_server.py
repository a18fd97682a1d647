"""
=============================================================================
EVENT-DRIVEN TCP LISTENER
=============================================================================

Accepts connections and feeds transport events to per-connection sessions,
all on ONE thread.

=============================================================================
WHY AN EVENT LOOP?
=============================================================================

Each session does a tiny, bounded amount of work: one recv(), a parse, a
handler call, one sendall(). There is nothing to gain from threads, and a
single thread means sessions cannot race each other. The only thing a
thread-per-connection model buys is tolerance for clients that connect and
then sit idle, and readiness notification gives us that for free:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         EVENT LOOP                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   selector.select(timeout)     ← sleeps until a socket is ready     │
    │        │                                                             │
    │        ├── listening socket readable                                │
    │        │      accept() → non-blocking client socket                 │
    │        │      session_factory(transport, address) → session         │
    │        │      register(client, EVENT_READ, data=session)            │
    │        │                                                             │
    │        └── client socket readable                                   │
    │               recv()                                                 │
    │                 ├── b""        → session.on_end()                   │
    │                 ├── OSError    → session.on_error(exc)              │
    │                 └── bytes      → session.on_data(chunk)             │
    │                                                                      │
    │   (a closing session unregisters its socket through the transport)  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

selectors.DefaultSelector picks the best mechanism the platform has
(epoll on Linux, kqueue on macOS/BSD, select elsewhere).

The select timeout is not a request timeout. It only bounds how long
shutdown() waits before the loop notices it should stop.

=============================================================================
SIGNAL HANDLING
=============================================================================

SIGINT (Ctrl+C) and SIGTERM (docker stop, systemd) trigger shutdown() so
the loop can close every open session and the listening socket. Python only
allows installing signal handlers from the main thread; when the server
runs in a background thread (tests) the handlers are simply not installed.

=============================================================================
"""

import logging
import selectors
import signal
import socket
import threading
from typing import Callable, Dict, List, Optional, Tuple

from ..config import ServerConfig
from .connection import ConnectionSession, SocketTransport, Transport


logger = logging.getLogger(__name__)


SessionFactory = Callable[[Transport, Tuple[str, int]], ConnectionSession]


class SocketServer:
    """
    Single-threaded TCP listener built on the selectors module.

    Usage:
        def open_session(transport, address):
            return ConnectionSession(transport, router, address=address)

        server = SocketServer(config)
        server.start(open_session)   # Blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        """
        Args:
            config: Host, port, backlog, buffer size and select timeout.

        The socket is not created until start().
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._selector: Optional[selectors.BaseSelector] = None
        self._bound_address: Optional[Tuple[str, int]] = None

        self._running = False
        self._ready_event = threading.Event()
        self._shutdown_event = threading.Event()

        self._original_handlers: Dict[int, object] = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The (host, port) actually bound.

        Differs from the configured address when port 0 was requested.
        """
        if self._bound_address is not None:
            return self._bound_address
        return (self.config.host, self.config.port)

    @property
    def active_connections(self) -> int:
        """Number of client sockets currently registered with the loop."""
        if self._selector is None:
            return 0
        return sum(1 for key in self._selector.get_map().values() if key.data is not None)

    # =========================================================================
    # SOCKET SETUP
    # =========================================================================

    def _create_socket(self) -> socket.socket:
        """Create the listening socket (TCP, IPv4, non-blocking)."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restarting the server must not fail with "Address already in use"
        # while the old socket sits in TIME_WAIT.
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Responses are written in one sendall(); don't let Nagle hold them.
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.setblocking(False)
        return sock

    def _setup_signals(self) -> None:
        """Route SIGTERM and SIGINT to shutdown() (main thread only)."""
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self) -> None:
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self, session_factory: SessionFactory) -> None:
        """
        Bind, listen and run the event loop.

        BLOCKS until shutdown() is called.

        Args:
            session_factory: Called once per accepted connection with the
                             connection's transport and peer address.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        self._bound_address = self._socket.getsockname()[:2]

        self._selector = selectors.DefaultSelector()
        self._selector.register(self._socket, selectors.EVENT_READ, data=None)

        self._running = True
        self._shutdown_event.clear()
        self._setup_signals()

        host, port = self._bound_address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._event_loop(session_factory)
        finally:
            self._cleanup()

    def _event_loop(self, session_factory: SessionFactory) -> None:
        while self._running:
            try:
                events = self._selector.select(timeout=self.config.select_timeout)
            except OSError as e:
                if self._running:
                    logger.error(f"Select error: {e}")
                break

            for key, _mask in events:
                if key.data is None:
                    self._accept(session_factory)
                else:
                    self._read(key.fileobj, key.data)

    def _accept(self, session_factory: SessionFactory) -> None:
        """Accept one pending connection and register its session."""
        try:
            client_socket, client_address = self._socket.accept()
        except BlockingIOError:
            return  # Another event already took it
        except OSError as e:
            logger.error(f"Accept error: {e}")
            return

        client_socket.setblocking(False)
        self._log_socket_info(client_socket, client_address)

        transport = SocketTransport(client_socket, on_close=self._unregister)
        session = session_factory(transport, client_address[:2])
        self._selector.register(client_socket, selectors.EVENT_READ, data=session)

    def _read(self, client_socket: socket.socket, session: ConnectionSession) -> None:
        """Do one recv() and hand the outcome to the session."""
        try:
            chunk = client_socket.recv(self.config.buffer_size)
        except BlockingIOError:
            return
        except OSError as e:
            session.on_error(e)
            return

        if not chunk:
            session.on_end()
            return

        try:
            session.on_data(chunk)
        except Exception as e:
            # Only this connection is lost; the loop keeps serving.
            logger.exception(f"[{session.id}] Unhandled error in session: {e}")
            session.on_error(e)

    def _unregister(self, client_socket: socket.socket) -> None:
        """Stop watching a client socket; called right before it closes."""
        if self._selector is None:
            return
        try:
            self._selector.unregister(client_socket)
        except (KeyError, ValueError):
            pass  # Never registered, or already removed

    def _log_socket_info(self, client_socket: socket.socket, client_address) -> None:
        try:
            local_address = client_socket.getsockname()
        except OSError:
            local_address = ("?", 0)
        logger.debug(
            f"Accepted connection: remote {client_address[0]}:{client_address[1]}, "
            f"local {local_address[0]}:{local_address[1]}"
        )

    def shutdown(self) -> None:
        """
        Ask the event loop to stop.

        Safe from any thread and from signal handlers; idempotent. The loop
        exits within config.select_timeout seconds.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _open_sessions(self) -> List[ConnectionSession]:
        if self._selector is None:
            return []
        return [key.data for key in list(self._selector.get_map().values()) if key.data is not None]

    def _cleanup(self) -> None:
        """Close leftover sessions, the selector and the listening socket."""
        self._restore_signals()

        for session in self._open_sessions():
            session.close()

        if self._selector is not None:
            self._selector.close()
            self._selector = None

        if self._socket is not None:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._running = False
        self._ready_event.clear()
        self._shutdown_event.set()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is listening. Returns False on timeout."""
        return self._ready_event.wait(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """Block until the server has stopped. Returns False on timeout."""
        return self._shutdown_event.wait(timeout)
