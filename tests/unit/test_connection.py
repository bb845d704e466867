"""
Unit tests for the client connection wrapper.
"""

import socket

import pytest

from webserver.core.connection import Connection, ConnectionState


@pytest.fixture
def socket_pair():
    """A connected (server side, client side) socket pair."""
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    client_side.close()
    server_side.close()


def make_connection(sock, **kwargs) -> Connection:
    kwargs.setdefault("timeout", 2.0)
    return Connection(socket=sock, address=("127.0.0.1", 50000), **kwargs)


class TestReadRequestLine:
    """Tests for reading the first request line."""

    def test_strips_crlf(self, socket_pair):
        """The line ending is not part of the result."""
        server_side, client_side = socket_pair
        client_side.sendall(b"GET / HTTP/1.1\r\nHost: localhost\r\n\r\n")

        conn = make_connection(server_side)
        assert conn.read_request_line() == "GET / HTTP/1.1"
        assert conn.state == ConnectionState.READING

    def test_bare_newline(self, socket_pair):
        """A lone \\n also ends the line."""
        server_side, client_side = socket_pair
        client_side.sendall(b"GET /sleep HTTP/1.1\n")

        assert make_connection(server_side).read_request_line() == "GET /sleep HTTP/1.1"

    def test_line_split_across_packets(self, socket_pair):
        """Reads continue until the newline arrives."""
        server_side, client_side = socket_pair
        client_side.sendall(b"GET / HT")
        client_side.sendall(b"TP/1.1\r\n")

        conn = make_connection(server_side, buffer_size=4)
        assert conn.read_request_line() == "GET / HTTP/1.1"

    def test_partial_line_then_close(self, socket_pair):
        """Whatever arrived before the client closed is returned."""
        server_side, client_side = socket_pair
        client_side.sendall(b"GET / HTTP/1.1")
        client_side.shutdown(socket.SHUT_WR)

        assert make_connection(server_side).read_request_line() == "GET / HTTP/1.1"

    def test_closed_without_data(self, socket_pair):
        """A client that sends nothing yields None."""
        server_side, client_side = socket_pair
        client_side.shutdown(socket.SHUT_WR)

        assert make_connection(server_side).read_request_line() is None

    def test_timeout_without_data(self, socket_pair):
        """A silent client yields None once the timeout expires."""
        server_side, _ = socket_pair

        conn = make_connection(server_side, timeout=0.1)
        assert conn.read_request_line() is None

    def test_long_line_is_cut(self, socket_pair):
        """Lines longer than max_request_line are truncated."""
        server_side, client_side = socket_pair
        client_side.sendall(b"A" * 100 + b"\r\n")

        conn = make_connection(server_side, max_request_line=32, buffer_size=8)
        assert conn.read_request_line() == "A" * 32


class TestSendAndClose:
    """Tests for writing and closing."""

    def test_send_response(self, socket_pair):
        """Bytes reach the client."""
        server_side, client_side = socket_pair
        conn = make_connection(server_side)

        assert conn.send_response(b"HTTP/1.1 200 OK\r\n\r\n") is True
        assert client_side.recv(1024) == b"HTTP/1.1 200 OK\r\n\r\n"
        assert conn.state == ConnectionState.WRITING

    def test_close_is_idempotent(self, socket_pair):
        """close() twice is safe and the client sees EOF."""
        server_side, client_side = socket_pair
        client_side.shutdown(socket.SHUT_WR)

        conn = make_connection(server_side)
        conn.close()
        conn.close()

        assert conn.state == ConnectionState.CLOSED
        assert client_side.recv(1024) == b""

    def test_context_manager_closes(self, socket_pair):
        """Leaving the with block closes the connection."""
        server_side, client_side = socket_pair
        client_side.shutdown(socket.SHUT_WR)

        with make_connection(server_side) as conn:
            pass

        assert conn.state == ConnectionState.CLOSED
