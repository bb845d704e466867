"""
=============================================================================
JOB QUEUE
=============================================================================

The channel between whoever submits work and the workers that run it.

    submitters (many)                                  workers (many)
    ─────────────────                                  ──────────────
    accept loop ──┐                                  ┌──► Worker-0
    other thread ─┼──► submit() ──► [J1][J2][J3] ──► take() ──► Worker-1
    test code ────┘                                  └──► Worker-2

queue.Queue already gives us the hard parts: it is thread-safe, blocks
readers while it is empty, and wakes exactly one waiting reader per put().
What it does NOT have is a notion of being CLOSED, so this module adds one.

=============================================================================
CLOSING THE QUEUE
=============================================================================

close() appends a single end-of-stream marker behind every job already
accepted. Because the queue is FIFO, a worker only meets the marker after
the backlog in front of it is gone.

    [J1][J2][J3][END]
                 ▲
                 └── appended by close()

    Worker-0 takes END ─► puts END back ─► returns None (closed)
    Worker-1 takes END ─► puts END back ─► returns None (closed)
    ...

Putting the marker back means one marker is enough for any number of
workers; the pool never has to know how many "poison pills" to send.

A lock ties the closed flag to the put(), so a submit() racing with close()
is either queued in front of the marker or rejected with PoolClosed.
Nothing is accepted and then lost.

=============================================================================
"""

import queue
import threading
from typing import Callable, Optional

from .errors import PoolClosed


Job = Callable[[], object]

# End-of-stream marker. A private object so no user job can ever equal it.
_CLOSED = object()


class JobQueue:
    """
    Unbounded, closable, multi-producer multi-consumer job channel.

    Usage:
        jobs = JobQueue()
        jobs.submit(lambda: print("hi"))   # any thread
        job = jobs.take()                  # worker thread, blocks
        jobs.close()                       # take() returns None once drained
    """

    def __init__(self):
        # maxsize=0 means unbounded: submit() never waits for space
        self._queue: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False

    def submit(self, job: Job) -> None:
        """
        Queue a job for exactly one worker.

        Raises:
            PoolClosed: If close() has already been called.
        """
        with self._lock:
            if self._closed:
                raise PoolClosed()
            self._queue.put(job)

    def take(self) -> Optional[Job]:
        """
        Block until a job is available and return it.

        Returns None once the queue is closed and every job queued before
        close() has been handed out.
        """
        item = self._queue.get()
        if item is _CLOSED:
            # Hand the marker on so every other taker sees it too
            self._queue.put(_CLOSED)
            return None
        return item

    def close(self) -> None:
        """Stop accepting jobs. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_CLOSED)

    @property
    def closed(self) -> bool:
        """True once close() has been called."""
        return self._closed

    def __len__(self) -> int:
        """Approximate number of jobs waiting to be taken."""
        pending = self._queue.qsize()
        if self._closed:
            pending -= 1  # the end-of-stream marker
        return max(pending, 0)
