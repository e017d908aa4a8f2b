"""
Unit tests for HTTP response building.
"""

import gzip
import io

import pytest

from minihttp.http.response import (
    HTTPResponse,
    ResponseBuilder,
    ok,
    created,
    not_found,
    method_not_allowed,
    internal_error,
)
from minihttp.http.status_codes import HTTPStatus


def split_response(data: bytes):
    """Split serialized bytes into (status line, headers dict, body)."""
    head, _, body = data.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    headers = dict(line.split(": ", 1) for line in lines[1:])
    return lines[0], headers, body


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        """Test status line generation."""
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert HTTPResponse(status=HTTPStatus.NOT_FOUND).status_line == "HTTP/1.1 404 Not Found"

    def test_status_line_unknown_code(self):
        assert HTTPResponse(status=299).status_line == "HTTP/1.1 299 Unknown"

    def test_bodiless_response_bytes(self):
        assert HTTPResponse().to_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_to_bytes_includes_headers(self):
        """Test that to_bytes includes all headers."""
        response = HTTPResponse(
            status=HTTPStatus.OK,
            headers={"X-Custom": "value"},
            body=b"test",
        )

        result = response.to_bytes()

        assert result.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"X-Custom: value\r\n" in result
        assert b"Content-Length: 4\r\n" in result
        assert result.endswith(b"\r\n\r\ntest")

    def test_content_length_overrides_caller_value(self):
        response = HTTPResponse(headers={"Content-Length": "999"}, body=b"abc")
        _, headers, body = split_response(response.to_bytes())

        assert headers["Content-Length"] == "3"
        assert body == b"abc"

    def test_empty_body_still_gets_content_length(self):
        _, headers, body = split_response(HTTPResponse(body=b"").to_bytes())

        assert headers["Content-Length"] == "0"
        assert body == b""

    def test_gzip_content_length_is_compressed_size(self):
        response = HTTPResponse(
            headers={"Content-Encoding": "gzip", "Content-Type": "text/plain"},
            body=b"abc" * 100,
        )
        _, headers, body = split_response(response.to_bytes())

        assert int(headers["Content-Length"]) == len(body)
        assert gzip.decompress(body) == b"abc" * 100

    def test_other_encoding_not_compressed(self):
        response = HTTPResponse(headers={"Content-Encoding": "br"}, body=b"abc")
        _, headers, body = split_response(response.to_bytes())

        assert body == b"abc"
        assert headers["Content-Length"] == "3"

    def test_serialization_does_not_mutate_headers(self):
        response = HTTPResponse(headers={"X-A": "1"}, body=b"abc")
        response.to_bytes()

        assert response.headers == {"X-A": "1"}

    def test_write_to(self):
        sink = io.BytesIO()
        response = HTTPResponse(body=b"hi")

        written = response.write_to(sink)

        assert sink.getvalue() == response.to_bytes()
        assert written == len(sink.getvalue())

    def test_custom_protocol(self):
        response = HTTPResponse(status=HTTPStatus.CREATED, protocol="HTTP/1.0")
        assert response.to_bytes() == b"HTTP/1.0 201 Created\r\n\r\n"


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_text_response(self):
        response = ResponseBuilder().text("hello").build()

        assert response.status == 200
        assert response.headers["Content-Type"] == "text/plain"
        assert response.body == b"hello"

    def test_octet_stream(self):
        response = ResponseBuilder().octet_stream(b"\x00\x01").build()

        assert response.headers["Content-Type"] == "application/octet-stream"
        assert response.body == b"\x00\x01"

    def test_header_last_write_wins(self):
        response = (ResponseBuilder()
            .header("X-A", "1")
            .header("X-A", "2")
            .build())

        assert response.headers == {"X-A": "2"}

    def test_headers_bulk(self):
        response = ResponseBuilder().headers({"X-A": "1", "X-B": "2"}).build()
        assert response.headers == {"X-A": "1", "X-B": "2"}

    def test_gzip_sets_encoding_header_only(self):
        response = ResponseBuilder().text("abc").gzip().build()

        assert response.headers["Content-Encoding"] == "gzip"
        assert response.body == b"abc"

    def test_body_none_removes_body(self):
        response = ResponseBuilder().text("abc").body(None).build()
        assert response.body is None

    def test_status_and_protocol(self):
        response = (ResponseBuilder()
            .protocol("HTTP/1.0")
            .status(HTTPStatus.NOT_FOUND)
            .build())

        assert response.status_line == "HTTP/1.0 404 Not Found"

    def test_build_returns_independent_snapshots(self):
        builder = ResponseBuilder().header("X-A", "1")
        first = builder.build()

        builder.header("X-B", "2").status(HTTPStatus.CREATED)
        second = builder.build()

        assert first.headers == {"X-A": "1"}
        assert first.status == 200
        assert second.headers == {"X-A": "1", "X-B": "2"}
        assert second.status == 201

    def test_builder_to_bytes(self):
        assert ResponseBuilder().status(HTTPStatus.NOT_FOUND).to_bytes() == (
            b"HTTP/1.1 404 Not Found\r\n\r\n"
        )

    def test_frozen_snapshot(self):
        response = ResponseBuilder().build()

        with pytest.raises(AttributeError):
            response.status = 500


class TestConvenienceFunctions:
    """Tests for the bodiless shortcut responses."""

    @pytest.mark.parametrize("factory,expected", [
        (ok, b"HTTP/1.1 200 OK\r\n\r\n"),
        (created, b"HTTP/1.1 201 Created\r\n\r\n"),
        (not_found, b"HTTP/1.1 404 Not Found\r\n\r\n"),
        (method_not_allowed, b"HTTP/1.1 405 Method Not Allowed\r\n\r\n"),
        (internal_error, b"HTTP/1.1 500 Internal Server Error\r\n\r\n"),
    ])
    def test_wire_format(self, factory, expected):
        assert factory().to_bytes() == expected
