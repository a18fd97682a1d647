"""
=============================================================================
HTTP RESPONSE ENCODER
=============================================================================

Handlers return HTTPResponse values; the encoder turns them into the bytes
written to the socket right before the connection is closed.

=============================================================================
WIRE FORMAT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  HTTP/1.1 200 OK\r\n                   ← status line               │
    │  Content-Type: text/plain\r\n                                       │
    │  Content-Length: 25\r\n                ← UTF-8 bytes, not chars     │
    │  \r\n                                                               │
    │  Welcome to the home page!             ← body                       │
    └─────────────────────────────────────────────────────────────────────┘

Exactly two headers, always in this order. No Date, no Server, no
Connection header: every response is followed by a close, so the client
needs nothing beyond the length to frame the body.

Content-Length counts ENCODED bytes:

    body = "café"      len(body) == 4
                       len(body.encode("utf-8")) == 5   ← what we send

Getting this wrong makes clients truncate the body or hang waiting for
bytes that never come.

The reason phrase follows the coarse rule in status_codes.reason_phrase:
"OK" for 200, "Error" for everything else (201 included).

=============================================================================
"""

import json
from dataclasses import dataclass
from typing import Any

from .status_codes import HTTPStatus, reason_phrase


HTTP_VERSION = "HTTP/1.1"
DEFAULT_CONTENT_TYPE = "text/plain"


@dataclass(frozen=True)
class HTTPResponse:
    """
    A response produced by a handler.

    Immutable; consumed once by the encoder.

        Handler returns           to_bytes()                sendall()
        HTTPResponse     ─────►   b"HTTP/1.1 ..."   ─────►   then close()
    """

    status_code: int = HTTPStatus.OK
    content_type: str = DEFAULT_CONTENT_TYPE
    body: str = ""

    @property
    def reason(self) -> str:
        """Reason phrase for the status line ("OK" or "Error")."""
        return reason_phrase(self.status_code)

    @property
    def status_line(self) -> str:
        """Example: "HTTP/1.1 200 OK"."""
        return f"{HTTP_VERSION} {int(self.status_code)} {self.reason}"

    @property
    def body_bytes(self) -> bytes:
        return self.body.encode("utf-8")

    def to_bytes(self) -> bytes:
        """
        Serialize to the exact bytes sent on the wire.

        Returns:
            Status line, Content-Type, Content-Length, blank line, body.
        """
        body = self.body_bytes
        head = (
            f"{self.status_line}\r\n"
            f"Content-Type: {self.content_type}\r\n"
            f"Content-Length: {len(body)}\r\n"
            f"\r\n"
        )
        return head.encode("utf-8") + body


def encode_response(response: HTTPResponse) -> bytes:
    """Serialize ``response`` for the wire. Same as response.to_bytes()."""
    return response.to_bytes()


# =============================================================================
# CONVENIENCE CONSTRUCTORS
# =============================================================================
#
#     return ok("Hello")
#     return json_response({"id": 1}, status_code=HTTPStatus.CREATED)
#     return not_found()
#
# The error helpers produce the server's default responses, so their
# bodies are fixed strings that clients may compare against.
#
# =============================================================================

def ok(body: str = "", content_type: str = DEFAULT_CONTENT_TYPE) -> HTTPResponse:
    """200 response with the given body."""
    return HTTPResponse(HTTPStatus.OK, content_type, body)


def text_response(status_code: int, body: str) -> HTTPResponse:
    """Plain-text response with any status code."""
    return HTTPResponse(status_code, DEFAULT_CONTENT_TYPE, body)


def html_response(html: str, status_code: int = HTTPStatus.OK) -> HTTPResponse:
    """HTML response; sets Content-Type to text/html."""
    return HTTPResponse(status_code, "text/html", html)


def json_response(data: Any, status_code: int = HTTPStatus.OK) -> HTTPResponse:
    """
    JSON response.

    Non-ASCII characters are written as-is (ensure_ascii=False); the
    encoder's byte count takes care of multi-byte characters.
    """
    return HTTPResponse(
        status_code,
        "application/json",
        json.dumps(data, ensure_ascii=False),
    )


def not_found() -> HTTPResponse:
    """The router's default for unmatched (method, path) pairs."""
    return text_response(HTTPStatus.NOT_FOUND, "Not Found")


def bad_request(message: str = "Bad Request") -> HTTPResponse:
    """Answer for requests the decoder rejected."""
    return text_response(HTTPStatus.BAD_REQUEST, message)


def payload_too_large() -> HTTPResponse:
    return text_response(HTTPStatus.PAYLOAD_TOO_LARGE, "Payload Too Large")


def internal_error() -> HTTPResponse:
    """
    Answer for a handler that raised.

    Never put exception details in here; they go to the log.
    """
    return text_response(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal Server Error")


def error_response(status_code: int) -> HTTPResponse:
    """Default response for a decode failure with ``status_code``."""
    if status_code == HTTPStatus.PAYLOAD_TOO_LARGE:
        return payload_too_large()
    return bad_request()
