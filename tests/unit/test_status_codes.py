"""
Unit tests for HTTP status codes.
"""

import pytest

from minihttp.http.status_codes import HTTPStatus, status_text


class TestHTTPStatus:

    def test_int_comparison(self):
        assert HTTPStatus.OK == 200
        assert HTTPStatus(404) is HTTPStatus.NOT_FOUND

    @pytest.mark.parametrize("status,phrase", [
        (HTTPStatus.OK, "OK"),
        (HTTPStatus.CREATED, "Created"),
        (HTTPStatus.NOT_FOUND, "Not Found"),
        (HTTPStatus.METHOD_NOT_ALLOWED, "Method Not Allowed"),
        (HTTPStatus.INTERNAL_SERVER_ERROR, "Internal Server Error"),
    ])
    def test_phrase(self, status, phrase):
        assert status.phrase == phrase

    def test_every_member_has_a_phrase(self):
        for status in HTTPStatus:
            assert status.phrase != "Unknown"

    def test_only_sent_codes_are_members(self):
        assert sorted(HTTPStatus) == [200, 201, 404, 405, 500]


class TestStatusText:

    def test_known(self):
        assert status_text(201) == "Created"
        assert status_text(HTTPStatus.NOT_FOUND) == "Not Found"

    @pytest.mark.parametrize("code", [204, 299, 400, 413, 418, 503, 999, 0])
    def test_unknown(self, code):
        assert status_text(code) == "Unknown"
