"""
Unit tests for the demo application routes.
"""

import json

from tcphttp.handlers import build_demo_router
from tcphttp.handlers.demo import ABOUT_PAGE, WELCOME_MESSAGE
from tcphttp.http import HTTPRequest


class TestDemoRoutes:
    """Tests for the bundled demo handlers."""

    def test_home(self):
        response = build_demo_router().handle(HTTPRequest(method="GET", path="/"))

        assert response.status_code == 200
        assert response.content_type == "text/plain"
        assert response.body == WELCOME_MESSAGE == "Welcome to the home page!"

    def test_about(self):
        response = build_demo_router().handle(HTTPRequest(method="GET", path="/about"))

        assert response.status_code == 200
        assert response.content_type == "text/html"
        assert response.body == ABOUT_PAGE

    def test_submit_echoes_fields(self):
        request = HTTPRequest(
            method="POST",
            path="/submit",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            body="name=FirstName%20LastName&email=bsmth%40example.com",
        )
        response = build_demo_router().handle(request)

        assert response.status_code == 201
        assert response.content_type == "application/json"
        assert json.loads(response.body) == {
            "received": {"name": "FirstName LastName", "email": "bsmth@example.com"}
        }

    def test_submit_empty_body(self):
        request = HTTPRequest(method="POST", path="/submit")
        response = build_demo_router().handle(request)

        assert json.loads(response.body) == {"received": {}}

    def test_get_submit_is_404(self):
        response = build_demo_router().handle(HTTPRequest(method="GET", path="/submit"))
        assert response.status_code == 404

    def test_registered_routes(self):
        assert build_demo_router().table.routes() == [
            ("GET", "/"),
            ("GET", "/about"),
            ("POST", "/submit"),
        ]
