"""
=============================================================================
ACCESS LOGGING
=============================================================================

One line per answered request, written to the "tcphttp.access" logger so
it can be routed separately from diagnostic output:

    logging.getLogger("tcphttp.access").addHandler(file_handler)

Two formats:

    text   127.0.0.1 - - [17/Oct/2026:06:40:00 +0000] "GET /" 200 25 0.42ms
    json   {"connection_id": "a1b2c3d4", "method": "GET", "path": "/", ...}

=============================================================================
"""

import json
import logging
import time
from dataclasses import asdict, dataclass


logger = logging.getLogger("tcphttp.access")


@dataclass
class AccessLogEntry:
    """Structured record of one request/response exchange."""

    connection_id: str
    method: str
    path: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status_code"] = int(self.status_code)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        """Apache-style line, readable by most log analysers."""
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {int(self.status_code)} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


def log_access(entry: AccessLogEntry, log_format: str = "text") -> None:
    """Emit ``entry`` at INFO on the access logger."""
    if log_format == "json":
        logger.info(json.dumps(entry.to_dict()))
    else:
        logger.info(entry.to_text())


def timestamp_now() -> str:
    return time.strftime("%d/%b/%Y:%H:%M:%S %z")
