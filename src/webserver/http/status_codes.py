"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The handful of status codes the demo server can answer with.

    HTTP/1.1 200 OK
             ─── ──
              │   └── Reason phrase (HTTPStatus.phrase)
              └────── Status code (the enum value)

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200                        # Page found and sent
    NOT_FOUND = 404                 # No route for this request line
    INTERNAL_SERVER_ERROR = 500     # Route matched but the page could not be read

    @property
    def phrase(self) -> str:
        """Get the reason phrase for this status code."""
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
