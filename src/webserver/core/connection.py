"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket. A Connection is created on the accept
thread and then handed, inside a job, to a worker; from then on only that
worker touches it.

The demo server needs exactly one thing from the request: its first line.

    GET /sleep HTTP/1.1\r\n       ◄── read_request_line() returns this,
    Host: localhost:7878\r\n          without the \r\n
    \r\n

TCP is a byte stream, not a message stream, so the line may arrive split
across several recv() calls. We keep reading until we see a newline, the
client closes, or the line grows past max_request_line.

=============================================================================
"""

import socket
import time
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, for logging and debugging."""
    NEW = "new"              # Just accepted
    READING = "reading"      # Reading the request line
    WRITING = "writing"      # Sending the response
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier (for logging).
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    # Configuration (passed from ServerConfig)
    buffer_size: int = 1024
    timeout: Optional[float] = 30.0
    max_request_line: int = 8192

    def __post_init__(self):
        # Accepted sockets may inherit the listener's timeout; reset it
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    def read_request_line(self) -> Optional[str]:
        """
        Read the first line of the request.

        Returns:
            The line without its line ending, or None if the client closed
            the connection or timed out before sending anything.
        """
        self.state = ConnectionState.READING
        buffer = b""

        while b"\n" not in buffer and len(buffer) < self.max_request_line:
            try:
                chunk = self.socket.recv(self.buffer_size)
            except socket.timeout:
                logger.debug(f"[{self.id}] Timed out waiting for request line")
                break
            except (ConnectionResetError, BrokenPipeError):
                break
            if not chunk:
                break  # Client closed its side
            buffer += chunk

        if not buffer:
            return None

        line = buffer.split(b"\n", 1)[0][:self.max_request_line]
        return line.rstrip(b"\r").decode("utf-8", errors="replace")

    def send_response(self, data: bytes) -> bool:
        """
        Send response data to the client.

        Returns:
            True if send succeeded, False if the client went away.
        """
        self.state = ConnectionState.WRITING
        try:
            # sendall() loops until every byte is written
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    def close(self):
        """
        Close the connection gracefully.

        shutdown(SHUT_WR) sends FIN so the client sees the end of the
        response, then we drain whatever the client still sends (headers
        we never read) before releasing the socket.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Client already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure connection is closed."""
        self.close()
        return False
