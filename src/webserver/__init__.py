"""
=============================================================================
WEBSERVER - Fixed-Size Thread Pool and a Tiny Multi-Threaded Web Server
=============================================================================

The heart of this package is ThreadPool: N worker threads, one shared job
queue, graceful shutdown. The web server around it exists to give the pool
real work, one job per accepted connection.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    webserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m webserver)
    ├── server.py            # WebServer: accept loop + thread pool
    ├── config.py            # ServerConfig dataclass
    ├── core/
    │   ├── errors.py        # PoolError and friends
    │   ├── job_queue.py     # Closable multi-producer/multi-consumer queue
    │   ├── thread_pool.py   # Worker threads and ThreadPool
    │   ├── socket_server.py # TCP accept loop
    │   └── connection.py    # Client socket wrapper
    ├── http/
    │   ├── status_codes.py  # HTTPStatus enum
    │   ├── response.py      # Response serialization
    │   └── router.py        # Request line → page table
    └── pages/               # hello.html, 404.html

=============================================================================
QUICK START
=============================================================================

    from webserver import ThreadPool

    with ThreadPool(4) as pool:
        for n in range(100):
            pool.execute(partial(print, n))
    # All 100 jobs have run here, and all 4 threads have exited.

    # Or run the web server:
    #   python -m webserver --workers 4 --port 7878

=============================================================================
"""

__version__ = "1.0.0"

from .core import (
    ThreadPool,
    JobQueue,
    PoolState,
    WorkerState,
    PoolError,
    InvalidPoolSize,
    PoolClosed,
    ShutdownTimeout,
)
from .config import ServerConfig
from .server import WebServer

__all__ = [
    "ThreadPool",
    "JobQueue",
    "PoolState",
    "WorkerState",
    "PoolError",
    "InvalidPoolSize",
    "PoolClosed",
    "ShutdownTimeout",
    "ServerConfig",
    "WebServer",
    "__version__",
]
