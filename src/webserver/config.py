"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the web server and its thread pool.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m webserver --workers 8                           │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── WEBSERVER_WORKERS=8 python -m webserver                   │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Validation happens once, at startup. A bad worker count is reported with
the same InvalidPoolSize error the pool itself raises, before any socket is
opened or thread started.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .core.errors import InvalidPoolSize


# hello.html and 404.html ship inside the package
DEFAULT_DOCUMENT_ROOT = Path(__file__).parent / "pages"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Configuration for the web server.

    Development:
        ServerConfig(port=7878, log_level="DEBUG")

    Containers:
        ServerConfig(host="0.0.0.0", workers=16)
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """IP address to bind to. "0.0.0.0" listens on every interface."""

    port: int = 7878
    """Port to listen on. 0 lets the OS pick a free one."""

    backlog: int = 128
    """Maximum number of connections the OS queues before accept()."""

    timeout: Optional[float] = 30.0
    """
    Seconds a worker waits for a client to send its request line.
    None waits forever, which lets one silent client pin a worker.
    """

    max_request_line: int = 8192
    """Longest request line read from a client, in bytes."""

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    workers: int = 4
    """
    Number of worker threads. Fixed for the life of the server: at most
    this many connections are served at the same time.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    document_root: Path = field(default_factory=lambda: DEFAULT_DOCUMENT_ROOT)
    """Directory holding hello.html and 404.html."""

    sleep_seconds: float = 5.0
    """How long GET /sleep holds its worker before answering."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    def __post_init__(self):
        self.document_root = Path(self.document_root)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        WEBSERVER_HOST       Server host (default: 127.0.0.1)
        WEBSERVER_PORT       Server port (default: 7878)
        WEBSERVER_WORKERS    Worker threads (default: 4)
        WEBSERVER_TIMEOUT    Request line timeout in seconds (default: 30)
        WEBSERVER_ROOT       Directory with the HTML pages
        WEBSERVER_SLEEP      Delay for GET /sleep in seconds (default: 5)
        WEBSERVER_LOG_LEVEL  Logging level (default: INFO)
        """
        return cls(
            host=os.getenv("WEBSERVER_HOST", "127.0.0.1"),
            port=int(os.getenv("WEBSERVER_PORT", "7878")),
            workers=int(os.getenv("WEBSERVER_WORKERS", "4")),
            timeout=float(os.getenv("WEBSERVER_TIMEOUT", "30")),
            document_root=Path(os.getenv("WEBSERVER_ROOT", str(DEFAULT_DOCUMENT_ROOT))),
            sleep_seconds=float(os.getenv("WEBSERVER_SLEEP", "5")),
            log_level=os.getenv("WEBSERVER_LOG_LEVEL", "INFO"),
        )

    @property
    def log_level_number(self) -> int:
        """The log level as a logging module constant."""
        return getattr(logging, self.log_level.upper(), logging.INFO)

    def validate(self) -> None:
        """
        Validate configuration values (fail fast).

        Raises:
            InvalidPoolSize: If workers is not a positive integer.
            ValueError: For any other invalid value.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if isinstance(self.workers, bool) or not isinstance(self.workers, int) or self.workers < 1:
            raise InvalidPoolSize(self.workers)

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_request_line < 16:
            raise ValueError("max_request_line must be >= 16")

        if self.sleep_seconds < 0:
            raise ValueError("sleep_seconds must be >= 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")
