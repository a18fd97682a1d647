"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    python -m tcphttp                         # 127.0.0.1:3000
    python -m tcphttp --port 8000             # Custom port
    python -m tcphttp --host 0.0.0.0          # All interfaces (containers)
    python -m tcphttp --log-level DEBUG       # Log every accepted socket
    python -m tcphttp --log-format json       # JSON access log

The server comes up with the demo routes from tcphttp.handlers.demo.
Environment variables (HTTP_HOST, HTTP_PORT, ...) set the defaults that
command-line flags override.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import LOG_FORMATS, ServerConfig
from .handlers import register_demo_routes
from .server import HTTPServer


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tcphttp",
        description="HTTP/1.1 server built directly on TCP sockets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m tcphttp                      # Run with defaults
  python -m tcphttp --port 8000          # Custom port
  python -m tcphttp --host 0.0.0.0       # Listen on all interfaces
        """,
    )

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})",
    )
    parser.add_argument(
        "--max-request-size",
        type=int,
        default=defaults.max_request_size,
        help=f"Largest request in bytes before 413 (default: {defaults.max_request_size})",
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level.upper()})",
    )
    parser.add_argument(
        "--log-format",
        choices=list(LOG_FORMATS),
        default=defaults.log_format,
        help=f"Access log format (default: {defaults.log_format})",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"tcphttp {__version__}",
    )
    return parser


def main(argv=None) -> int:
    """Parse arguments, build the demo server and run it until stopped."""
    defaults = ServerConfig.from_env()
    args = build_parser(defaults).parse_args(argv)

    defaults.host = args.host
    defaults.port = args.port
    defaults.max_request_size = args.max_request_size
    defaults.log_level = args.log_level
    defaults.log_format = args.log_format

    try:
        server = HTTPServer(defaults)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    register_demo_routes(server)

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
