"""
HTTP pieces used by the demo server: status codes, response serialization
and the fixed request-line route table.
"""

from .status_codes import HTTPStatus
from .response import HTTPResponse, internal_error
from .router import Route, Router, default_router

__all__ = [
    "HTTPStatus",
    "HTTPResponse",
    "internal_error",
    "Route",
    "Router",
    "default_router",
]
