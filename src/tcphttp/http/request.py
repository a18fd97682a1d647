"""
=============================================================================
HTTP REQUEST DECODER
=============================================================================

Turns the bytes of a single transport read into a structured HTTPRequest.

=============================================================================
WHAT ARRIVES ON THE SOCKET
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  GET /contact HTTP/1.1\r\n            ← request line                │
    │  Host: localhost:3000\r\n             ← header lines                │
    │  Content-Type: application/x-www-form-urlencoded\r\n                │
    │  \r\n                                 ← blank line = end of head    │
    │  name=Ada&email=ada%40example.com     ← body (verbatim remainder)   │
    └─────────────────────────────────────────────────────────────────────┘

The whole message is expected in ONE read. There is no reassembly across
reads and no Content-Length bookkeeping: whatever follows the blank line is
the body.

=============================================================================
DECODING STEPS
=============================================================================

    raw bytes
        │
        ├──► decode UTF-8 (invalid sequences become U+FFFD)
        │
        ├──► partition on the first "\r\n\r\n"
        │        head ─────────────┐          body
        │        (no delimiter? whole text is head, body is "")
        │                          │
        ├──► head.split("\r\n")    │
        │        lines[0]  → request line → "METHOD PATH [VERSION]"
        │        lines[1:] → "Name: Value" (split on first ": ")
        │
        └──► HTTPRequest(method, path, headers, body)

What the decoder deliberately does NOT do:

    - percent-decode the path       ("/a%20b" stays "/a%20b")
    - split off the query string    ("/search?q=1" is the whole path)
    - upper/lower-case the method   (the route table does that)
    - normalise header names        ("X-Token" and "x-token" are distinct)
    - validate Content-Length

=============================================================================
MALFORMED INPUT
=============================================================================

    Empty method token / no path token  → HTTPParseError(400)
    Header line without ": "            → line skipped
    Read larger than max_request_size   → HTTPParseError(413)

The connection session catches HTTPParseError and answers with a default
response for its status code instead of routing a half-built request.

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union


logger = logging.getLogger(__name__)


HEAD_BODY_DELIMITER = "\r\n\r\n"
LINE_DELIMITER = "\r\n"
HEADER_SEPARATOR = ": "


class HTTPParseError(Exception):
    """
    Raised when a request cannot be decoded.

    Carries the HTTP status code the session should answer with:

        400 Bad Request       - Request line missing its method or path
        413 Payload Too Large - Single read exceeds max_request_size
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class HTTPRequest:
    """
    A decoded HTTP request.

    Created once per connection by the decoder and never modified. The
    four protocol fields are the ones that take part in equality;
    client_address is metadata for logs.

    Attributes:
        method:  Request method exactly as sent ("GET", "post", ...).
        path:    Request target exactly as sent, query string included.
        headers: Header name → value, names kept as received.
        body:    Everything after the blank line (may be empty).
        client_address: (ip, port) of the peer.
    """

    method: str
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: str = ""

    client_address: tuple[str, int] = field(default=("", 0), compare=False)

    def __post_init__(self):
        # Headers are a read-only copy of what was decoded.
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Look up a header without caring about the case of its name.

        Stored keys are left alone; this only changes how the lookup
        compares. An exact-case match wins when both exist.
        """
        if name in self.headers:
            return self.headers[name]

        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default

    @property
    def user_agent(self) -> str:
        """User-Agent header value, or "" when the client sent none."""
        return self.get_header("User-Agent", "") or ""

    def to_wire(self, version: str = "HTTP/1.1") -> str:
        """
        Reassemble the request as it would appear on the wire.

        Decoding the result gives back an equal HTTPRequest for any
        request whose method and path contain no spaces and whose
        header names and values contain no CRLF.
        """
        lines = [f"{self.method} {self.path} {version}"]
        for name, value in self.headers.items():
            lines.append(f"{name}{HEADER_SEPARATOR}{value}")
        head = LINE_DELIMITER.join(lines)
        return head + HEAD_BODY_DELIMITER + self.body


class RequestParser:
    """
    Decodes raw request data into HTTPRequest objects.

    Usage:
        parser = RequestParser(max_request_size=32 * 1024)
        request = parser.parse(b"GET / HTTP/1.1\\r\\nHost: x\\r\\n\\r\\n")
        request.method   # "GET"
        request.headers  # {"Host": "x"}
    """

    def __init__(self, max_request_size: int = 32 * 1024):
        """
        Initialize the parser.

        Args:
            max_request_size: Largest single read (in bytes) that will be
                              decoded. Bigger reads raise HTTPParseError(413).
        """
        self.max_request_size = max_request_size

    def parse(
        self,
        data: Union[bytes, str],
        client_address: tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Decode one complete request.

        Args:
            data: The bytes (or already-decoded text) of one transport read.
            client_address: Peer (ip, port), attached for logging.

        Returns:
            The decoded HTTPRequest.

        Raises:
            HTTPParseError: If the read is too large or the request line
                            is missing its method or path.
        """
        if isinstance(data, str):
            raw = data.encode("utf-8")
            text = data
        else:
            raw = data
            text = data.decode("utf-8", errors="replace")

        if len(raw) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(raw)} bytes",
                status_code=413,
            )

        # ─────────────────────────────────────────────────────────────────
        # HEAD / BODY SPLIT
        # ─────────────────────────────────────────────────────────────────
        # str.partition leaves body == "" when the delimiter is missing,
        # which is exactly the fallback we want.
        head, _, body = text.partition(HEAD_BODY_DELIMITER)

        lines = head.split(LINE_DELIMITER)
        method, path = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        return HTTPRequest(
            method=method,
            path=path,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str]:
        """
        Split "METHOD PATH [VERSION]" on single spaces.

        Tokens past the path (the protocol version and anything after it)
        are discarded.
        """
        tokens = line.split(" ")

        method = tokens[0]
        if not method:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        if len(tokens) < 2 or not tokens[1]:
            raise HTTPParseError(f"Request line has no path: {line!r}")

        return method, tokens[1]

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        Parse "Name: Value" lines into a dict.

        Names and values are stored verbatim. A repeated name keeps the
        last value. Lines without ": " are skipped.
        """
        headers: Dict[str, str] = {}

        for line in lines:
            name, sep, value = line.partition(HEADER_SEPARATOR)
            if not sep:
                if line:
                    logger.debug(f"Skipping header line without separator: {line!r}")
                continue
            headers[name] = value

        return headers


_default_parser = RequestParser()


def parse_request(
    data: Union[bytes, str],
    client_address: tuple[str, int] = ("", 0),
) -> HTTPRequest:
    """
    Decode a request with the default size limit.

    Use RequestParser directly when you need a different max_request_size.
    """
    return _default_parser.parse(data, client_address)
