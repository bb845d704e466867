"""
=============================================================================
REQUEST-LINE ROUTER
=============================================================================

Maps the first line of a request to the page that answers it.

The demo server only looks at the request line, and matches it EXACTLY:

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Request line              Status         Page        Delay        │
    ├─────────────────────────────────────────────────────────────────────┤
    │   GET / HTTP/1.1            200 OK         hello.html   -           │
    │   GET /sleep HTTP/1.1       200 OK         hello.html   sleep_seconds│
    │   (anything else)           404 Not Found  404.html     -           │
    └─────────────────────────────────────────────────────────────────────┘

"GET / HTTP/1.0" or "get / HTTP/1.1" are therefore 404s. The /sleep route
exists to show the pool at work: while one worker sleeps, the others keep
answering requests for "/".

=============================================================================
"""

from dataclasses import dataclass
from typing import Dict

from .status_codes import HTTPStatus


@dataclass(frozen=True)
class Route:
    """What to send back for a request line."""
    status: HTTPStatus
    page: str
    delay: float = 0.0


class Router:
    """
    Exact-match table from request line to Route.

    Usage:
        router = Router(fallback=Route(HTTPStatus.NOT_FOUND, "404.html"))
        router.add("GET", "/", Route(HTTPStatus.OK, "hello.html"))
        route = router.resolve("GET / HTTP/1.1")
    """

    def __init__(self, fallback: Route, version: str = "HTTP/1.1"):
        self.fallback = fallback
        self.version = version
        self._routes: Dict[str, Route] = {}

    def add(self, method: str, path: str, route: Route) -> "Router":
        """Register a route. Returns self for chaining."""
        self._routes[f"{method} {path} {self.version}"] = route
        return self

    def resolve(self, request_line: str) -> Route:
        """Get the route for a request line, or the fallback."""
        return self._routes.get(request_line, self.fallback)


def default_router(sleep_seconds: float = 5.0) -> Router:
    """The server's fixed route table."""
    return (Router(fallback=Route(HTTPStatus.NOT_FOUND, "404.html"))
        .add("GET", "/", Route(HTTPStatus.OK, "hello.html"))
        .add("GET", "/sleep", Route(HTTPStatus.OK, "hello.html", delay=sleep_seconds)))
