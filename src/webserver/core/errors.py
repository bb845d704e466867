"""
=============================================================================
THREAD POOL ERRORS
=============================================================================

Every failure the pool reports to its caller derives from PoolError, so
callers can catch the whole family with one except clause:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        Error Taxonomy                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   PoolError                                                          │
    │     ├── InvalidPoolSize   (also a ValueError)                        │
    │     │     └── ThreadPool(0), ThreadPool(-3), ThreadPool("4")         │
    │     │                                                                │
    │     ├── PoolClosed        (also a RuntimeError)                      │
    │     │     └── execute() after shutdown() has started                 │
    │     │                                                                │
    │     └── ShutdownTimeout   (also a TimeoutError)                      │
    │           └── shutdown(timeout=...) expired with workers alive       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Errors raised INSIDE a job are not part of this list. They belong to the
job, and the worker that runs it only logs them.

=============================================================================
"""

from typing import Any


class PoolError(Exception):
    """Base class for all thread pool errors."""


class InvalidPoolSize(PoolError, ValueError):
    """
    Raised when a pool is created with a worker count that is not a
    positive integer.

    The pool never clamps a bad size to 1: a caller asking for zero
    workers has a bug, and a pool that silently ran anyway would hide it.
    """

    def __init__(self, size: Any):
        super().__init__(f"Thread pool size must be a positive integer, got {size!r}")
        self.size = size


class PoolClosed(PoolError, RuntimeError):
    """Raised when a job is submitted after shutdown has begun."""

    def __init__(self, message: str = "Thread pool is shut down, no new jobs accepted"):
        super().__init__(message)


class ShutdownTimeout(PoolError, TimeoutError):
    """Raised when workers are still running at the shutdown deadline."""

    def __init__(self, alive: int, timeout: float):
        super().__init__(
            f"{alive} worker(s) still running after {timeout:.2f}s shutdown timeout"
        )
        self.alive = alive
        self.timeout = timeout
