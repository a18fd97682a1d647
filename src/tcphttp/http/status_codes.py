"""
=============================================================================
HTTP STATUS CODES
=============================================================================

Named constants for the status codes handlers commonly return, plus the
reason-phrase rule used when writing the status line.

=============================================================================
THE STATUS LINE
=============================================================================

    HTTP/1.1 200 OK\r\n
    ────┬─── ─┬─ ─┬─
        │     │   │
    Version  Code Reason phrase

The reason phrase is purely informational. Clients act on the numeric code
and ignore the text, which is why this server gets away with a two-word
vocabulary:

    ┌────────────────┬──────────────────┐
    │  Status code   │  Reason phrase   │
    ├────────────────┼──────────────────┤
    │  200           │  OK              │
    │  anything else │  Error           │
    └────────────────┴──────────────────┘

So a 201 goes out as "HTTP/1.1 201 Error" and a 404 as
"HTTP/1.1 404 Error". Existing clients of this server depend on that exact
status line, so do not swap in the RFC 7231 phrases.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    Status codes used by the server and the bundled handlers.

    IntEnum members compare equal to plain ints, so handlers may use either:

        >>> HTTPStatus.NOT_FOUND == 404
        True
    """

    # 2xx SUCCESS
    OK = 200
    CREATED = 201
    NO_CONTENT = 204

    # 3xx REDIRECTION
    MOVED_PERMANENTLY = 301
    FOUND = 302

    # 4xx CLIENT ERROR
    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    PAYLOAD_TOO_LARGE = 413

    # 5xx SERVER ERROR
    INTERNAL_SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503


OK_PHRASE = "OK"
ERROR_PHRASE = "Error"


def reason_phrase(status_code: int) -> str:
    """
    Get the reason phrase written after ``status_code`` in the status line.

    Args:
        status_code: Numeric HTTP status code.

    Returns:
        "OK" for 200, "Error" for every other code.
    """
    return OK_PHRASE if status_code == HTTPStatus.OK else ERROR_PHRASE
