"""
Request handlers bundled with the server.

Handlers are plain functions ``(HTTPRequest) -> HTTPResponse``. The ones
here back the ``python -m tcphttp`` demo application.
"""

from .demo import about, build_demo_router, home, register_demo_routes, submit


__all__ = [
    "home",
    "about",
    "submit",
    "register_demo_routes",
    "build_demo_router",
]
