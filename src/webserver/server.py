"""
=============================================================================
WEB SERVER
=============================================================================

Puts the pieces together: the socket server accepts, the thread pool
serves.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      REQUEST FLOW                                    │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   accept thread                      worker thread                   │
    │   ─────────────                      ─────────────                   │
    │   accept() ──► Connection                                            │
    │                  │                                                   │
    │                  └── pool.execute(partial(handle_connection, conn))  │
    │                                           │                          │
    │   back to accept()                        ▼                          │
    │                                   read request line                  │
    │                                   router.resolve(line)               │
    │                                   sleep (GET /sleep only)            │
    │                                   read page from document_root       │
    │                                   send status line + Content-Length  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

With 4 workers, five clients hitting /sleep at once means the fifth waits
in the queue until one of the first four is done. Nothing spawns a fifth
thread.

=============================================================================
GRACEFUL SHUTDOWN
=============================================================================

1. shutdown() (or Ctrl+C / SIGTERM) stops the accept loop
2. Leaving the "with ThreadPool(...)" block closes the job queue
3. Connections already queued are still served
4. run() returns once every worker has been joined

=============================================================================
"""

import logging
import time
from functools import partial
from typing import Optional

from .config import ServerConfig
from .core import Connection, PoolClosed, SocketServer, ThreadPool
from .http import HTTPResponse, default_router, internal_error


logger = logging.getLogger(__name__)


class WebServer:
    """
    Multi-threaded web server serving a fixed set of pages.

    Usage:
        server = WebServer(ServerConfig(port=7878, workers=4))
        server.run()   # Blocks until Ctrl+C or server.shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Defaults are used if omitted.

        Raises:
            InvalidPoolSize: If config.workers is not a positive integer.
            ValueError: If any other setting is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail fast, before binding anything

        self._socket_server = SocketServer(self.config)
        self._router = default_router(sleep_seconds=self.config.sleep_seconds)
        self._pool: Optional[ThreadPool] = None

    @property
    def address(self):
        """The address the server is bound to."""
        return self._socket_server.address

    @property
    def pool(self) -> Optional[ThreadPool]:
        """The thread pool while run() is active, else None."""
        return self._pool

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Returns after shutdown() has been called and every accepted
        connection has been served.
        """
        self._setup_logging()

        with ThreadPool(self.config.workers) as pool:
            self._pool = pool
            try:
                self._socket_server.start(self._handle_connection)
            except KeyboardInterrupt:
                logger.info("Received keyboard interrupt")
            finally:
                logger.info(f"Draining {pool.pending_jobs} queued connection(s)...")

        self._pool = None
        logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. Safe to call from any thread."""
        self._socket_server.shutdown()

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """Wait until the accept loop has exited."""
        return self._socket_server.wait_for_shutdown(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = self.config.log_level_number

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("webserver").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Queue a connection for a worker (runs on the accept thread).
        """
        try:
            self._pool.execute(partial(self.handle_connection, conn))
        except PoolClosed:
            logger.warning(f"[{conn.id}] Pool is shutting down, dropping connection")
            conn.close()

    def handle_connection(self, conn: Connection):
        """
        Serve one connection (runs on a worker thread).

        A client that sends nothing gets nothing back. A page that cannot
        be read is answered with a 500, since the pool itself never tells
        anyone a job failed.
        """
        with conn:
            request_line = conn.read_request_line()
            if request_line is None:
                logger.debug(f"[{conn.id}] No request line received")
                return

            route = self._router.resolve(request_line)
            if route.delay:
                time.sleep(route.delay)

            page_path = self.config.document_root / route.page
            try:
                contents = page_path.read_bytes()
            except OSError as e:
                logger.error(f"[{conn.id}] Cannot read {page_path}: {e}")
                response = internal_error()
            else:
                response = HTTPResponse(status=route.status, body=contents)

            conn.send_response(response.to_bytes())
            logger.info(
                f'{conn.client_ip} "{request_line}" {int(response.status)} {len(response.body)}'
            )
