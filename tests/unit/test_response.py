"""
Unit tests for HTTP response serialization.
"""

from webserver.http import HTTPResponse, HTTPStatus, internal_error


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        """Test status line generation."""
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert HTTPResponse(status=HTTPStatus.NOT_FOUND).status_line == "HTTP/1.1 404 Not Found"

    def test_to_bytes_format(self):
        """Status line, Content-Length, blank line, body."""
        response = HTTPResponse(status=HTTPStatus.OK, body=b"hello world")

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Length: 11\r\n"
            b"\r\n"
            b"hello world"
        )

    def test_content_length_counts_bytes(self):
        """Non-ASCII text is measured after encoding."""
        response = HTTPResponse(body="héllo")

        assert response.body == "héllo".encode("utf-8")
        assert b"Content-Length: 6\r\n" in response.to_bytes()

    def test_empty_body(self):
        """An empty body still gets Content-Length: 0."""
        result = HTTPResponse().to_bytes()
        assert result.endswith(b"Content-Length: 0\r\n\r\n")

    def test_manual_content_length_is_replaced(self):
        """Content-Length always reflects the real body."""
        response = HTTPResponse(body=b"abc", headers={"Content-Length": "999"})
        result = response.to_bytes()

        assert b"Content-Length: 3\r\n" in result
        assert b"999" not in result

    def test_extra_headers(self):
        """Custom headers come before Content-Length."""
        result = HTTPResponse(body=b"x", headers={"X-Custom": "value"}).to_bytes()
        assert b"HTTP/1.1 200 OK\r\nX-Custom: value\r\nContent-Length: 1\r\n\r\nx" == result


class TestHelpers:
    """Tests for convenience functions and status codes."""

    def test_internal_error(self):
        """internal_error() builds a 500."""
        response = internal_error()

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.to_bytes().startswith(b"HTTP/1.1 500 Internal Server Error\r\n")

    def test_status_phrases(self):
        """Every status has a phrase."""
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.INTERNAL_SERVER_ERROR.phrase == "Internal Server Error"
