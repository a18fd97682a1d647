"""
Demo route handlers.

A small application used by ``python -m tcphttp`` to show the server
working end to end:

    GET  /        → 200 text/plain  "Welcome to the home page!"
    GET  /about   → 200 text/html   short description page
    POST /submit  → 201 application/json  echo of the submitted form fields

Try it:

    curl http://127.0.0.1:3000/
    curl -d "name=FirstName%20LastName&email=bsmth%40example.com" \\
         http://127.0.0.1:3000/submit
"""

from ..http import (
    HTTPRequest,
    HTTPResponse,
    HTTPStatus,
    Router,
    html_response,
    json_response,
    ok,
    parse_body,
)


WELCOME_MESSAGE = "Welcome to the home page!"

ABOUT_PAGE = """<!DOCTYPE html>
<html>
<head><title>About</title></head>
<body>
  <h1>tcphttp</h1>
  <p>An HTTP/1.1 server written directly on top of TCP sockets.</p>
  <p>One request per connection. No keep-alive, no chunked encoding.</p>
</body>
</html>
"""


def home(request: HTTPRequest) -> HTTPResponse:
    return ok(WELCOME_MESSAGE)


def about(request: HTTPRequest) -> HTTPResponse:
    return html_response(ABOUT_PAGE)


def submit(request: HTTPRequest) -> HTTPResponse:
    """Decode the form body and echo the fields back as JSON."""
    fields = parse_body(request.body)
    return json_response({"received": fields}, status_code=HTTPStatus.CREATED)


def register_demo_routes(router) -> None:
    """
    Register the demo handlers.

    Args:
        router: A Router or an HTTPServer; anything with register_route().
    """
    router.register_route("GET", "/", home)
    router.register_route("GET", "/about", about)
    router.register_route("POST", "/submit", submit)


def build_demo_router() -> Router:
    """A Router with only the demo routes, handy in tests."""
    router = Router()
    register_demo_routes(router)
    return router
