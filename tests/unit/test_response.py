"""
Unit tests for response framing.
"""

from datetime import datetime, timezone, timedelta

import pytest

from myownwebserver.http.response import (
    HTTPResponse,
    ResponseFormatter,
    HTTPStatus,
    format_http_date,
)


FIXED_DATE = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


class RecordingLog:
    def __init__(self):
        self.lines = []

    def write(self, message: str) -> None:
        self.lines.append(message)


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        """Test status line generation."""
        response = HTTPResponse(status=HTTPStatus.OK)
        assert response.status_line == "HTTP/1.1 200 OK"

        response = HTTPResponse(status=HTTPStatus.NOT_FOUND)
        assert response.status_line == "HTTP/1.1 404 Not Found"

        response = HTTPResponse(status=HTTPStatus.METHOD_NOT_ACCEPTED)
        assert response.status_line == "HTTP/1.1 406 Method Not Accepted"

    def test_unknown_status_is_server_error(self):
        response = HTTPResponse(status=418)
        assert response.status_line == "HTTP/1.1 418 Server Error"

    def test_text_response_bytes(self):
        """Text bodies follow the blank line and end with CRLF."""
        response = HTTPResponse(
            status=HTTPStatus.OK,
            content_type="text/html",
            body="hello",
            server="127.0.0.1:8080",
            date=FIXED_DATE,
        )

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Server: 127.0.0.1:8080\r\n"
            b"Date: Mon, 19 Oct 2026 12:00:00 GMT\r\n"
            b"Content-Type: text/html\r\n"
            b"Content-Length: 5\r\n"
            b"\r\n"
            b"hello\r\n"
        )

    def test_content_length_counts_utf8_bytes(self):
        response = HTTPResponse(content_type="text/plain", body="café")

        assert response.headers["Content-Length"] == "5"
        assert response.to_bytes().endswith("café".encode("utf-8") + b"\r\n")

    def test_empty_text_body(self):
        response = HTTPResponse(content_type="text/plain", body="")

        assert response.headers["Content-Length"] == "0"
        assert response.to_bytes().endswith(b"\r\n\r\n\r\n")

    def test_error_response_has_no_entity_headers(self):
        response = HTTPResponse(
            status=HTTPStatus.NOT_FOUND,
            content_type="text/plain",
            body="Not found",
            server="127.0.0.1:8080",
            date=FIXED_DATE,
        )

        assert response.to_bytes() == (
            b"HTTP/1.1 404 Not Found\r\n"
            b"Server: 127.0.0.1:8080\r\n"
            b"Date: Mon, 19 Oct 2026 12:00:00 GMT\r\n"
            b"\r\n"
        )
        assert response.writes() == [response.to_bytes()]

    def test_binary_response_is_two_writes(self):
        image = b"GIF89a\x00\xff\r\n"
        response = HTTPResponse(content_type="image/gif", body=image)

        first, second = response.writes()

        assert first.endswith(b"Content-Length: 10\r\n\r\n")
        assert b"GIF89a" not in first
        assert second == image

    def test_binary_error_is_one_write(self):
        response = HTTPResponse(status=HTTPStatus.NOT_FOUND, content_type="image/gif", body=b"x")

        assert len(response.writes()) == 1

    def test_header_order(self):
        response = HTTPResponse(content_type="text/plain", body="x")

        assert list(response.headers) == ["Server", "Date", "Content-Type", "Content-Length"]


class TestResponseFormatter:
    """Tests for ResponseFormatter."""

    def test_stamps_server_and_version(self):
        formatter = ResponseFormatter("10.0.0.5:9000")

        response = formatter.build(200, "text/plain", "hi")

        assert response.server == "10.0.0.5:9000"
        assert response.version == "HTTP/1.1"
        assert b"Server: 10.0.0.5:9000\r\n" in response.to_bytes()

    def test_known_code_becomes_enum(self):
        response = ResponseFormatter("x").build(415, None, None)

        assert response.status is HTTPStatus.UNSUPPORTED_MEDIA_TYPE

    def test_unknown_code_keeps_number(self):
        data = ResponseFormatter("x").format(299, "text/plain", "ignored")

        assert data.startswith(b"HTTP/1.1 299 Server Error\r\n")
        assert b"Content-Length" not in data
        assert data.endswith(b"\r\n\r\n")

    def test_format_binary_returns_headers_only(self):
        data = ResponseFormatter("x").format(200, "image/jpeg", b"\xff\xd8\xff")

        assert data.endswith(b"Content-Length: 3\r\n\r\n")

    def test_logs_success_with_headers(self):
        log = RecordingLog()
        formatter = ResponseFormatter("127.0.0.1:8080", transaction_log=log)

        formatter.build(200, "text/html", "hello")

        assert len(log.lines) == 1
        line = log.lines[0]
        assert line.startswith(
            "[RESPONSE] - HTTP/1.1 200 OK Content-Type: text/html "
            "Content-Length: 5 Server: 127.0.0.1:8080 Date: "
        )
        assert line.endswith(" GMT")

    def test_logs_error_status_line_only(self):
        log = RecordingLog()
        formatter = ResponseFormatter("127.0.0.1:8080", transaction_log=log)

        formatter.build(505, None, None)

        assert log.lines == ["[RESPONSE] - HTTP/1.1 505 HTTP Version Not Supported"]


class TestFormatHttpDate:
    """Tests for format_http_date."""

    def test_format(self):
        assert format_http_date(datetime(2026, 1, 4, 7, 5, 9)) == "Sun, 04 Jan 2026 07:05:09 GMT"

    def test_converts_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        dt = datetime(2026, 10, 19, 14, 0, 0, tzinfo=plus_two)

        assert format_http_date(dt) == "Mon, 19 Oct 2026 12:00:00 GMT"

    @pytest.mark.parametrize("month,name", [(2, "Feb"), (7, "Jul"), (12, "Dec")])
    def test_month_names(self, month, name):
        assert f" {name} " in format_http_date(datetime(2026, month, 1))
