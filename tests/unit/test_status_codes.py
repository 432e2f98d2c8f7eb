"""
Unit tests for status codes and the extension whitelist.
"""

import pytest

from myownwebserver.http.status_codes import HTTPStatus, reason_phrase
from myownwebserver.http.mime_types import (
    get_content_type,
    is_text_type,
    is_image_type,
)


class TestHTTPStatus:

    @pytest.mark.parametrize("code,phrase", [
        (200, "OK"),
        (400, "Bad Request"),
        (404, "Not Found"),
        (406, "Method Not Accepted"),
        (415, "Unsupported Media Type"),
        (505, "HTTP Version Not Supported"),
    ])
    def test_phrases(self, code, phrase):
        assert reason_phrase(code) == phrase
        assert HTTPStatus(code).phrase == phrase

    @pytest.mark.parametrize("code", [500, 418, 0, 999])
    def test_unrecognized_is_server_error(self, code):
        assert reason_phrase(code) == "Server Error"

    def test_members_compare_to_ints(self):
        assert HTTPStatus.FAIL == 500
        assert HTTPStatus(404) is HTTPStatus.NOT_FOUND


class TestContentTypes:
    """The whitelist is total over its extensions and rejects the rest."""

    @pytest.mark.parametrize("name,content_type", [
        ("a.txt", "text/plain"),
        ("a.html", "text/html"),
        ("a.htm", "text/html"),
        ("a.jpg", "image/jpeg"),
        ("a.jpeg", "image/jpeg"),
        ("a.gif", "image/gif"),
        ("A.GIF", "image/gif"),
        ("archive.tar.txt", "text/plain"),
    ])
    def test_whitelisted(self, name, content_type):
        assert get_content_type(name) == content_type

    @pytest.mark.parametrize("name", ["a.bmp", "a.png", "a.css", "a.js", "Makefile", "a.", ".txt"])
    def test_not_whitelisted(self, name):
        assert get_content_type(name) is None

    def test_text_and_image_kinds(self):
        assert is_text_type("text/plain")
        assert is_text_type("text/html")
        assert is_image_type("image/jpeg")
        assert is_image_type("image/gif")
        assert not is_text_type("image/gif")
        assert not is_image_type(None)
