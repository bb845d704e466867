"""
=============================================================================
TCP SOCKET SERVER
=============================================================================

Listens for connections and hands each one to a callback. It never serves
a client itself: the callback turns the connection into a job for the
thread pool, and the accept loop goes straight back to accept().

    ┌─────────────────────┐
    │   Listening socket  │ ◄── bound once to host:port
    └──────────┬──────────┘
               │ accept()
               ▼
    ┌─────────────────────┐        ┌──────────────────────┐
    │   Connection(...)   │ ─────► │  connection_handler  │ ──► pool.execute()
    └─────────────────────┘        └──────────────────────┘

=============================================================================
STOPPING THE LOOP
=============================================================================

accept() blocks, so the listening socket gets a short timeout. Every time
it expires the loop rechecks the running flag. shutdown() only flips that
flag, which makes it safe to call from a signal handler or another thread.

SIGINT (Ctrl+C) and SIGTERM (docker stop) call shutdown() too, but Python
only lets the main thread install signal handlers. When the server runs on
another thread (as in the tests) we skip them.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import TYPE_CHECKING, Callable, Optional, Tuple

from .connection import Connection

if TYPE_CHECKING:
    # config imports core.errors, so only the type checker may import it here
    from ..config import ServerConfig


logger = logging.getLogger(__name__)

# Seconds between checks of the running flag while waiting in accept()
ACCEPT_POLL_INTERVAL = 0.5


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            pool.execute(partial(serve, conn))

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown()
    """

    def __init__(self, config: "ServerConfig"):
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set when the accept loop has exited
        self._stopped_event = threading.Event()

        # Saved so they can be restored if we are embedded in a larger app
        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        """Check if server is running."""
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The bound (host, port).

        Reports the real port once listening, which matters when the
        configured port is 0.
        """
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create and configure the server socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Rebind immediately after a restart instead of waiting out TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Send small responses immediately (disable Nagle's algorithm)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(ACCEPT_POLL_INTERVAL)
        return sock

    def _setup_signals(self):
        """Install SIGTERM/SIGINT handlers that trigger shutdown()."""
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread, leaving signal handlers alone")
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen, and accept connections until shutdown().

        Args:
            connection_handler: Called on the accept thread with each new
                                connection. It must return quickly.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        # Running before listen() so a client that connects sees is_running
        self._running = True
        self._stopped_event.clear()

        try:
            self._socket.listen(self.config.backlog)
            self._setup_signals()

            host, port = self.address
            logger.info(f"Server listening on {host}:{port}")

            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """Accept connections and pass them on while running."""
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                # Normal: lets us notice shutdown()
                continue
            except OSError as e:
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                timeout=self.config.timeout,
                max_request_line=self.config.max_request_line,
            )
            connection_handler(conn)

    def shutdown(self):
        """
        Stop the accept loop.

        Safe to call from any thread, and more than once.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        """Clean up resources when the loop ends."""
        self._running = False
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._stopped_event.set()
        logger.info("Socket server stopped")

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the accept loop to exit.

        Returns:
            True if it exited, False on timeout.
        """
        return self._stopped_event.wait(timeout)
