"""
=============================================================================
HTTP RESPONSE
=============================================================================

Serializes a status and a body into the bytes written back to the client.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    RESPONSE FORMAT                                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   HTTP/1.1 200 OK\r\n                ← Status line                  │
    │   Content-Length: 120\r\n            ← Body size in BYTES           │
    │   \r\n                               ← Empty line (separator)       │
    │   <!DOCTYPE html>...                 ← Body                         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Content-Length counts encoded bytes, not characters. "héllo" is five
characters but six bytes in UTF-8, and a client trusting a character
count would stop one byte short.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict

from .status_codes import HTTPStatus


@dataclass
class HTTPResponse:
    """
    An HTTP response ready to be sent.

    Usage:
        response = HTTPResponse(HTTPStatus.OK, "<h1>Hello</h1>")
        conn.send_response(response.to_bytes())
    """

    status: HTTPStatus = HTTPStatus.OK
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)
    version: str = "HTTP/1.1"

    def __post_init__(self):
        if isinstance(self.body, str):
            self.body = self.body.encode("utf-8")

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 404 Not Found"
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def to_bytes(self) -> bytes:
        """
        Serialize the response for socket.sendall().

        Content-Length is always computed from the body and overrides any
        value set by hand.
        """
        lines = [self.status_line]
        for name, value in self.headers.items():
            if name.lower() != "content-length":
                lines.append(f"{name}: {value}")
        lines.append(f"Content-Length: {len(self.body)}")

        # Empty line separates headers from body
        header_bytes = ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")
        return header_bytes + self.body


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    """500 response with a plain message body."""
    return HTTPResponse(status=HTTPStatus.INTERNAL_SERVER_ERROR, body=message)
