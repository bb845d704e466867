"""
=============================================================================
CORE COMPONENTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • Binds host:port and runs the accept() loop                       │
    │  • Wraps each client in a Connection and hands it off               │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ pool.execute(job)
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          THREAD POOL                                 │
    │  • A fixed number of worker threads                                 │
    │  • Workers take jobs from a shared, closable JobQueue               │
    │  • shutdown() runs the backlog, then joins every worker             │
    └─────────────────────────────────────────────────────────────────────┘

The thread pool knows nothing about sockets or HTTP. It runs argument-free
callables, whatever they do.
"""

from .errors import PoolError, InvalidPoolSize, PoolClosed, ShutdownTimeout
from .job_queue import Job, JobQueue
from .thread_pool import ThreadPool, Worker, WorkerState, PoolState
from .connection import Connection, ConnectionState
from .socket_server import SocketServer

__all__ = [
    # Thread pool
    "ThreadPool",
    "Worker",
    "WorkerState",
    "PoolState",
    "Job",
    "JobQueue",
    # Errors
    "PoolError",
    "InvalidPoolSize",
    "PoolClosed",
    "ShutdownTimeout",
    # Networking
    "SocketServer",
    "Connection",
    "ConnectionState",
]
