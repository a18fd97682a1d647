"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

Everything in this subpackage is pure protocol logic: no sockets, no
threads, no global state. Each piece can be tested with plain strings.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  request.py       bytes ──► HTTPRequest          (decoder)          │
    │  form.py          "a=1&b=2" ──► {"a": "1", ...}  (body decoder)     │
    │  routes.py        (METHOD, path) ──► handler     (route table)      │
    │  router.py        HTTPRequest ──► HTTPResponse   (dispatch)         │
    │  response.py      HTTPResponse ──► bytes         (encoder)          │
    │  status_codes.py  status constants, reason phrase rule              │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .form import parse_body
from .response import (
    HTTPResponse,
    encode_response,
    ok,
    text_response,
    html_response,
    json_response,
    not_found,
    bad_request,
    payload_too_large,
    internal_error,
    error_response,
)
from .routes import RouteTable, RouteTableFrozenError, Handler
from .router import Router
from .status_codes import HTTPStatus, reason_phrase


__all__ = [
    # Request decoding
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",
    "parse_body",
    # Responses
    "HTTPResponse",
    "encode_response",
    "ok",
    "text_response",
    "html_response",
    "json_response",
    "not_found",
    "bad_request",
    "payload_too_large",
    "internal_error",
    "error_response",
    # Routing
    "RouteTable",
    "RouteTableFrozenError",
    "Handler",
    "Router",
    # Status codes
    "HTTPStatus",
    "reason_phrase",
]
