"""
Unit tests for HTTP request decoding.
"""

import pytest

from tcphttp.http.request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    parse_request,
)


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing a simple GET request."""
        parser = RequestParser()
        request = parser.parse(sample_get_request, ("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.path == "/"
        assert request.body == ""
        assert request.client_address == ("127.0.0.1", 12345)

    def test_parse_headers_verbatim(self, sample_get_request: bytes):
        """Header names keep their case; values are not trimmed."""
        request = parse_request(sample_get_request)

        assert request.headers == {
            "Host": "localhost:3000",
            "User-Agent": "pytest",
            "Accept": "*/*",
        }
        assert "host" not in request.headers

    def test_parse_post_with_body(self, sample_form_request: bytes):
        """Test the body is the verbatim remainder after the blank line."""
        request = parse_request(sample_form_request)

        assert request.method == "POST"
        assert request.path == "/submit"
        assert request.body == "name=FirstName%20LastName&email=bsmth%40example.com"

    def test_accepts_text_input(self):
        request = parse_request("GET /text HTTP/1.1\r\nHost: x\r\n\r\n")

        assert request.method == "GET"
        assert request.path == "/text"
        assert request.headers == {"Host": "x"}

    def test_path_is_not_decoded_or_split(self):
        """Query strings and percent-escapes stay in the path."""
        raw = b"GET /search?q=hello%20world HTTP/1.1\r\nHost: test\r\n\r\n"
        request = parse_request(raw)

        assert request.path == "/search?q=hello%20world"

    def test_method_case_preserved(self):
        request = parse_request(b"get / HTTP/1.1\r\n\r\n")
        assert request.method == "get"

    def test_version_token_discarded(self):
        request = parse_request(b"GET /x HTTP/1.0 extra\r\n\r\n")

        assert request.method == "GET"
        assert request.path == "/x"

    def test_request_line_without_version(self):
        request = parse_request(b"GET /no-version\r\n\r\n")
        assert request.path == "/no-version"

    def test_missing_delimiter_treats_all_as_head(self):
        """No blank line: everything is head and the body is empty."""
        request = parse_request(b"GET /partial HTTP/1.1\r\nHost: example")

        assert request.path == "/partial"
        assert request.headers == {"Host": "example"}
        assert request.body == ""

    def test_body_split_on_first_delimiter_only(self):
        raw = b"POST /p HTTP/1.1\r\n\r\nline one\r\n\r\nline two"
        request = parse_request(raw)

        assert request.body == "line one\r\n\r\nline two"

    def test_header_value_split_on_first_separator(self):
        raw = b"GET / HTTP/1.1\r\nX-Note: a: b: c\r\n\r\n"
        request = parse_request(raw)

        assert request.headers == {"X-Note": "a: b: c"}

    def test_header_without_separator_is_skipped(self):
        raw = b"GET / HTTP/1.1\r\nGarbage\r\nHost:nospace\r\nAccept: */*\r\n\r\n"
        request = parse_request(raw)

        assert request.headers == {"Accept": "*/*"}

    def test_duplicate_header_last_wins(self):
        raw = b"GET / HTTP/1.1\r\nX-Id: 1\r\nX-Id: 2\r\n\r\n"
        request = parse_request(raw)

        assert request.headers == {"X-Id": "2"}

    def test_parse_missing_headers(self):
        """Test parsing request with no headers."""
        request = parse_request(b"GET / HTTP/1.1\r\n\r\n")

        assert request.method == "GET"
        assert request.path == "/"
        assert len(request.headers) == 0

    def test_content_length_not_enforced(self):
        raw = b"POST / HTTP/1.1\r\nContent-Length: 100\r\n\r\nshort"
        request = parse_request(raw)

        assert request.body == "short"

    def test_invalid_utf8_replaced(self):
        request = parse_request(b"POST / HTTP/1.1\r\n\r\n\xff")
        assert request.body == "\ufffd"

    @pytest.mark.parametrize("raw", [
        b"",
        b"\r\n\r\n",
        b"GET\r\nHost: test\r\n\r\n",
        b"GET \r\n\r\n",
        b" / HTTP/1.1\r\n\r\n",
    ])
    def test_malformed_request_line(self, raw: bytes):
        """Missing method or path raises a 400 parse error."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(raw)

        assert exc_info.value.status_code == 400

    def test_parse_request_too_large(self):
        """Test that oversized reads are rejected."""
        parser = RequestParser(max_request_size=100)
        raw = b"GET / HTTP/1.1\r\n" + b"X-Large: " + b"A" * 200 + b"\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parser.parse(raw)

        assert exc_info.value.status_code == 413

    def test_size_limit_counts_encoded_bytes(self):
        parser = RequestParser(max_request_size=20)
        text = "GET / HTTP/1.1\r\n\r\n" + "é" * 2  # 18 + 4 bytes

        with pytest.raises(HTTPParseError):
            parser.parse(text)


class TestRoundTrip:
    """Re-encoding a decoded request and decoding again is lossless."""

    @pytest.mark.parametrize("request_obj", [
        HTTPRequest("GET", "/", {"Host": "x"}, ""),
        HTTPRequest("POST", "/submit", {"Content-Type": "text/plain", "X-A": "1"}, "a=1&b=2"),
        HTTPRequest("DELETE", "/items?id=3", {}, ""),
        HTTPRequest("PUT", "/doc", {"X-Trace": "abc: def"}, "multi\r\n\r\nline"),
    ])
    def test_round_trip(self, request_obj: HTTPRequest):
        decoded = parse_request(request_obj.to_wire())
        assert decoded == request_obj

    def test_to_wire_layout(self):
        request = HTTPRequest("GET", "/", {"Host": "x"}, "")
        assert request.to_wire() == "GET / HTTP/1.1\r\nHost: x\r\n\r\n"


class TestHTTPRequest:
    """Tests for HTTPRequest dataclass."""

    def test_get_header_any_case(self):
        request = HTTPRequest(method="GET", path="/", headers={"Content-Type": "text/html"})

        assert request.get_header("Content-Type") == "text/html"
        assert request.get_header("content-type") == "text/html"
        assert request.get_header("X-Missing") is None
        assert request.get_header("X-Missing", "default") == "default"

    def test_user_agent(self):
        assert HTTPRequest("GET", "/", {"User-Agent": "curl/8"}).user_agent == "curl/8"
        assert HTTPRequest("GET", "/").user_agent == ""

    def test_immutable(self):
        request = HTTPRequest(method="GET", path="/")

        with pytest.raises(AttributeError):
            request.path = "/other"

    def test_headers_read_only(self):
        """Handlers cannot change the decoded headers."""
        request = parse_request(b"GET / HTTP/1.1\r\nHost: x\r\n\r\n")

        with pytest.raises(TypeError):
            request.headers["Host"] = "y"
        with pytest.raises(AttributeError):
            request.headers.clear()

        assert request.headers == {"Host": "x"}

    def test_headers_copied_from_source(self):
        source = {"Accept": "*/*"}
        request = HTTPRequest("GET", "/", source)
        source["Accept"] = "text/html"

        assert request.headers["Accept"] == "*/*"

    def test_client_address_ignored_in_equality(self):
        a = HTTPRequest("GET", "/", client_address=("1.1.1.1", 1))
        b = HTTPRequest("GET", "/", client_address=("2.2.2.2", 2))

        assert a == b
