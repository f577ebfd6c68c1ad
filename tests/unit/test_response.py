"""
Unit tests for HTTP response building.
"""

import json

import pytest

from compreflex.http.response import (
    HTTPResponse,
    ResponseBuilder,
    JSON_CONTENT_TYPE,
    HTML_CONTENT_TYPE,
    bad_request,
    error_response,
    internal_error,
    not_found,
    ok_html,
    ok_json,
    ok_text,
    sanitize_message,
    to_compact_json,
)
from compreflex.http.status_codes import HTTPStatus


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        """Test status line generation."""
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert HTTPResponse(status=HTTPStatus.NOT_FOUND).status_line == "HTTP/1.1 404 Not Found"

    def test_explicit_reason(self):
        response = HTTPResponse(status=200, reason="Fine")
        assert response.status_line == "HTTP/1.1 200 Fine"

    def test_unknown_status_reason(self):
        assert HTTPResponse(status=299).reason == "Unknown"

    def test_mandatory_headers_in_order(self):
        """Content-Type, Content-Length, Connection, CORS always come first."""
        response = HTTPResponse(body="hi", headers={"X-Custom": "value"})

        assert list(response.headers) == [
            "Content-Type",
            "Content-Length",
            "Connection",
            "Access-Control-Allow-Origin",
            "X-Custom",
        ]
        assert response.headers["Connection"] == "close"
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_to_bytes_layout(self):
        result = HTTPResponse(body="test", headers={"X-Custom": "value"}).to_bytes()

        assert result.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"X-Custom: value\r\n" in result
        assert b"Content-Length: 4\r\n" in result
        assert result.endswith(b"\r\n\r\ntest")

    def test_content_length_counts_utf8_bytes(self):
        """Non-ASCII text: bytes, not characters."""
        response = HTTPResponse(body="ñandú")

        assert response.content_length == 7
        assert b"Content-Length: 7\r\n" in response.to_bytes()

    def test_content_length_recomputed(self):
        """A stale Content-Length never reaches the wire."""
        response = HTTPResponse(body="a")
        response.body = "abc"
        response.set_header("Content-Length", "999")

        result = response.to_bytes()

        assert b"Content-Length: 3\r\n" in result
        assert b"999" not in result

    def test_empty_body(self):
        result = HTTPResponse(body="").to_bytes()

        assert b"Content-Length: 0\r\n" in result
        assert result.endswith(b"\r\n\r\n")

    def test_set_header_chaining(self):
        response = HTTPResponse().set_header("X-One", "1").set_header("X-Two", "2")

        assert response.headers["X-One"] == "1"
        assert response.headers["X-Two"] == "2"


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_json_is_compact(self):
        response = ResponseBuilder().json({"value": [1, 2]}).build()

        assert response.body == '{"value":[1,2]}'
        assert response.headers["Content-Type"] == JSON_CONTENT_TYPE

    def test_json_keeps_non_ascii(self):
        response = ResponseBuilder().json({"value": "ação"}).build()
        assert response.body == '{"value":"ação"}'

    def test_raw_json_untouched(self):
        body = '{"value": 7}'
        assert ResponseBuilder().raw_json(body).build().body == body

    def test_html(self):
        response = ResponseBuilder().html("<p>x</p>").build()
        assert response.headers["Content-Type"] == HTML_CONTENT_TYPE

    def test_status_and_header(self):
        response = (ResponseBuilder()
            .status(HTTPStatus.SERVICE_UNAVAILABLE)
            .header("Retry-After", "1")
            .text("busy")
            .build())

        assert response.status == 503
        assert response.reason == "Service Unavailable"
        assert response.headers["Retry-After"] == "1"


class TestConvenienceFunctions:
    """Tests for the canned builders."""

    def test_ok_json(self):
        response = ok_json('{"value":3}')

        assert response.status == 200
        assert response.body == '{"value":3}'
        assert response.headers["Content-Type"] == JSON_CONTENT_TYPE

    def test_ok_text(self):
        assert ok_text("hello").body == "hello"

    def test_ok_html(self):
        assert ok_html("<html></html>").headers["Content-Type"].startswith("text/html")

    def test_bad_request(self):
        response = bad_request("Missing 'comando'")

        assert response.status == 400
        assert json.loads(response.body) == {"error": "Missing 'comando'"}

    def test_not_found(self):
        response = not_found("Use /compreflex")

        assert response.status == 404
        assert response.body == '{"error":"Use /compreflex"}'

    def test_internal_error(self):
        response = internal_error("Connection refused")

        assert response.status == 500
        assert response.body == '{"error":"Connection refused"}'

    def test_error_message_double_quotes_replaced(self):
        response = error_response(HTTPStatus.BAD_REQUEST, 'Missing "comando"')
        assert response.body == """{"error":"Missing 'comando'"}"""

    @pytest.mark.parametrize("status", [400, 404, 500])
    def test_error_bodies_are_json(self, status: int):
        assert "error" in json.loads(error_response(status, "x").body)


class TestHelpers:

    def test_sanitize_message(self):
        assert sanitize_message('say "hi"') == "say 'hi'"
        assert sanitize_message(None) == ""

    def test_to_compact_json(self):
        assert to_compact_json({"a": None, "b": True}) == '{"a":null,"b":true}'
