"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables in one dataclass, with defaults suitable for local
development.

    Priority (highest to lowest):

    1. Command-line arguments     python -m tcphttp --port 8000
    2. Environment variables      HTTP_PORT=8000 python -m tcphttp
    3. Defaults below

Configuration is validated once, when the server is constructed, so a bad
port fails at startup rather than on the first connection.

=============================================================================
"""

import os
from dataclasses import dataclass


LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    Development:
        ServerConfig(log_level="DEBUG")

    Container:
        ServerConfig(host="0.0.0.0", log_format="json")
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Address to bind. Use "0.0.0.0" to accept connections from other hosts."""

    port: int = 3000
    """TCP port to listen on. 0 lets the OS pick a free port (useful in tests)."""

    backlog: int = 128
    """Pending connections the OS queues before refusing new ones."""

    buffer_size: int = 65536
    """
    Bytes requested per recv(). A request must fit in one read, so this is
    also the practical upper bound on request size.
    """

    max_request_size: int = 32 * 1024
    """
    Reads larger than this are answered with 413. Must stay below
    buffer_size, otherwise no single read could ever exceed it.
    """

    select_timeout: float = 0.5
    """
    Seconds the event loop waits for socket activity before checking
    whether it was asked to stop. Only affects shutdown latency.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    log_format: str = "text"
    """Access log format: "text" (one line per request) or "json"."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Build a configuration from environment variables.

            HTTP_HOST              Bind address   (default: 127.0.0.1)
            HTTP_PORT              Port           (default: 3000)
            HTTP_BUFFER_SIZE       recv() size    (default: 65536)
            HTTP_MAX_REQUEST_SIZE  413 threshold  (default: 32768)
            HTTP_LOG_LEVEL         Logging level  (default: INFO)
            HTTP_LOG_FORMAT        text or json   (default: text)
        """
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "3000")),
            buffer_size=int(os.getenv("HTTP_BUFFER_SIZE", "65536")),
            max_request_size=int(os.getenv("HTTP_MAX_REQUEST_SIZE", "32768")),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
            log_format=os.getenv("HTTP_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Check every value, raising ValueError on the first bad one.

        Port 0 is accepted: it asks the OS for an ephemeral port.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.max_request_size < 1:
            raise ValueError("max_request_size must be >= 1")

        if self.max_request_size >= self.buffer_size:
            raise ValueError(
                f"max_request_size ({self.max_request_size}) must be smaller than "
                f"buffer_size ({self.buffer_size})"
            )

        if self.select_timeout <= 0:
            raise ValueError("select_timeout must be > 0")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(
                f"Invalid log_format: {self.log_format!r}. Must be one of {LOG_FORMATS}."
            )
