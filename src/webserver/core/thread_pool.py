"""
=============================================================================
THREAD POOL IMPLEMENTATION
=============================================================================

A fixed number of worker threads that run jobs taken from a shared queue.
The point is to separate "accepting work" from "doing work": the accept
loop can receive thousands of connections, yet only N threads ever run.

=============================================================================
WHY A FIXED-SIZE POOL?
=============================================================================

Without a pool, each connection gets its own thread:

    for connection in accept_connections():
        threading.Thread(target=handle, args=(connection,)).start()

    Problems:
    1. No upper bound on threads, so a burst of clients means a burst of threads
    2. Each thread carries its own stack (1-8 MB)
    3. Thread creation cost is paid on every request

With a pool, the threads are created once:

    with ThreadPool(4) as pool:
        for connection in accept_connections():
            pool.execute(partial(handle, connection))

    1. Exactly 4 threads for the whole life of the pool
    2. Extra work waits in the queue instead of spawning threads
    3. A slow job only ties up its own worker

=============================================================================
ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          ThreadPool(size=4)                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   execute(job) ──► ┌──────────────────────────────────────────┐     │
    │                    │              JobQueue                     │     │
    │                    │  [Job 1] [Job 2] [Job 3] ...   (unbounded)│     │
    │                    └────────────────────┬─────────────────────┘     │
    │                                         │ take()                     │
    │                                         ▼                            │
    │   ┌──────────┐  ┌──────────┐  ┌──────────┐  ┌──────────┐            │
    │   │ Worker-0 │  │ Worker-1 │  │ Worker-2 │  │ Worker-3 │            │
    │   │  (idle)  │  │  (busy)  │  │  (busy)  │  │  (idle)  │            │
    │   └──────────┘  └──────────┘  └──────────┘  └──────────┘            │
    │                                                                      │
    │   • The worker count never changes after construction               │
    │   • Each job runs on exactly one worker, exactly once               │
    │   • A job that raises is logged; the worker carries on              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
POOL LIFECYCLE
=============================================================================

    ThreadPool(4)          shutdown() / end of "with"          joins done
         │                          │                               │
         ▼                          ▼                               ▼
    ┌──────────┐              ┌────────────┐                  ┌──────────┐
    │  ACTIVE  │ ───────────► │  DRAINING  │ ───────────────► │ STOPPED  │
    └──────────┘              └────────────┘                  └──────────┘
    accepts jobs              queue closed,                   all threads
                              backlog still runs              have exited

    There is no way back: a STOPPED pool cannot be restarted.

Shutdown is graceful. Every job that execute() accepted before the queue
closed runs to completion before shutdown() returns. execute() after that
point raises PoolClosed; jobs are never dropped without telling anyone.

=============================================================================
COMMON QUESTIONS
=============================================================================

Q: Why not grow the pool when the queue backs up?
A: Then the thread count is unbounded again, just slower. A fixed pool
   makes resource usage predictable; the backlog waits in the queue.

Q: What happens if a job hangs?
A: Its worker hangs with it and the pool has one fewer worker until the
   job returns. There are no job timeouts and no cancellation.

Q: What about CPU-bound jobs?
A: The GIL lets only one thread run Python bytecode at a time, so this
   pool shines for I/O-bound jobs such as serving connections.

=============================================================================
"""

import threading
import time
import logging
from enum import Enum
from typing import Optional

from .errors import InvalidPoolSize, PoolError, ShutdownTimeout
from .job_queue import Job, JobQueue


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    """
    Worker thread states.

    IDLE and BUSY are both "running": the worker is either waiting in
    take() or executing a job. STOPPED is final.
    """
    IDLE = "idle"        # Waiting for a job
    BUSY = "busy"        # Executing a job
    STOPPED = "stopped"  # Thread exited


class PoolState(Enum):
    """Pool lifecycle states. Transitions only go forward."""
    ACTIVE = "active"        # Workers running, jobs accepted
    DRAINING = "draining"    # Queue closed, backlog still running
    STOPPED = "stopped"      # Every worker joined


class Worker(threading.Thread):
    """
    Worker thread that runs jobs from the queue until it is closed.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        Worker Loop                                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. job = queue.take()          (the only place a worker blocks)   │
    │          │                                                           │
    │          ├── None → queue closed and drained → exit, STOPPED        │
    │          │                                                           │
    │          └── job  → continue to step 2                               │
    │                                                                      │
    │   2. Run job() on this thread                                        │
    │          │                                                           │
    │          └── any raise → log it, count it, keep going                │
    │                                                                      │
    │   3. Back to step 1                                                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘
    """

    def __init__(self, job_queue: JobQueue, worker_id: int):
        """
        Initialize the worker.

        Args:
            job_queue: Queue to take jobs from.
            worker_id: Identifier for this worker (for logging).
        """
        # daemon=True: a pool that is never shut down does not keep the
        # interpreter alive. shutdown() still joins every worker.
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.job_queue = job_queue
        self.worker_id = worker_id
        self.state = WorkerState.IDLE

        # Metrics, written only by this thread
        self.jobs_completed = 0
        self.jobs_failed = 0

    @property
    def is_running(self) -> bool:
        """True while the worker is waiting for or executing a job."""
        return self.state is not WorkerState.STOPPED

    def run(self):
        """
        Main worker loop.

        Runs until take() reports that the queue is closed and empty.
        """
        logger.debug(f"Worker {self.worker_id} started")

        try:
            while True:
                job = self.job_queue.take()
                if job is None:
                    break
                self._execute_job(job)
        finally:
            self.state = WorkerState.STOPPED
            logger.debug(
                f"Worker {self.worker_id} stopped "
                f"({self.jobs_completed} completed, {self.jobs_failed} failed)"
            )

    def _execute_job(self, job: Job):
        """
        Run a single job to completion.

        Anything the job raises ends this job only, SystemExit and
        KeyboardInterrupt included. We log it with its traceback and return
        to the loop so the jobs still queued behind it run.
        """
        self.state = WorkerState.BUSY
        start_time = time.monotonic()

        try:
            job()
        except BaseException as e:
            elapsed = time.monotonic() - start_time
            logger.exception(
                f"Worker {self.worker_id} job failed after {elapsed:.3f}s: {e}"
            )
            self.jobs_failed += 1
        else:
            elapsed = time.monotonic() - start_time
            logger.debug(f"Worker {self.worker_id} completed job in {elapsed:.3f}s")
            self.jobs_completed += 1
        finally:
            self.state = WorkerState.IDLE


class ThreadPool:
    """
    Fixed-size thread pool for fire-and-forget jobs.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      ThreadPool Usage                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   # Create pool: 4 workers start immediately                         │
    │   pool = ThreadPool(4)                                               │
    │                                                                      │
    │   # Submit jobs (returns at once, no result handle)                  │
    │   pool.execute(lambda: handle_connection(conn))                      │
    │   pool.execute(partial(process, data))                               │
    │                                                                      │
    │   # Check status                                                     │
    │   print(pool.stats)                                                  │
    │                                                                      │
    │   # Shutdown: waits for every queued job, then joins workers         │
    │   pool.shutdown()                                                    │
    │                                                                      │
    │   # Or let the "with" block do it                                    │
    │   with ThreadPool(4) as pool:                                        │
    │       pool.execute(job)                                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘
    """

    def __init__(self, size: int):
        """
        Create the pool and start its workers.

        Args:
            size: Number of worker threads. Must be an int >= 1.

        Raises:
            InvalidPoolSize: If size is not a positive integer. No thread
                             has been created when this is raised.
            RuntimeError: If the OS refuses to start a thread. Workers that
                          did start are stopped and joined first.
        """
        # bool is an int subclass, but ThreadPool(True) is always a bug
        if isinstance(size, bool) or not isinstance(size, int) or size < 1:
            raise InvalidPoolSize(size)

        self._size = size

        # ─────────────────────────────────────────────────────────────────
        # THE JOB QUEUE
        # ─────────────────────────────────────────────────────────────────
        # The only shared mutable structure. All coordination between
        # submitters and workers goes through it.

        self._job_queue = JobQueue()

        self._workers: list[Worker] = []
        self._state = PoolState.ACTIVE

        # Serializes shutdown() callers; never held while a job runs
        self._shutdown_lock = threading.Lock()

        logger.info(f"Starting thread pool with {size} workers")

        try:
            for worker_id in range(size):
                worker = Worker(job_queue=self._job_queue, worker_id=worker_id)
                worker.start()
                self._workers.append(worker)
        except Exception:
            # The pool cannot honor its worker count, so undo what we did
            logger.error(
                f"Failed to start worker {len(self._workers)} of {size}, "
                f"stopping the {len(self._workers)} already running"
            )
            self._job_queue.close()
            for worker in self._workers:
                worker.join()
            self._state = PoolState.STOPPED
            raise

    # =========================================================================
    # SUBMISSION
    # =========================================================================

    def execute(self, job: Job) -> None:
        """
        Submit a job for execution on some worker.

        Returns immediately. The job runs exactly once, on exactly one
        worker; nothing is returned to the caller about its outcome.
        Jobs submitted one after another by the same thread are started
        in that order.

        Args:
            job: Argument-free callable. Bind arguments with a closure or
                 functools.partial.

        Raises:
            TypeError: If job is not callable.
            PoolClosed: If shutdown() has already begun.
        """
        if not callable(job):
            raise TypeError(f"job must be callable, got {type(job).__name__}")

        self._job_queue.submit(job)

    # =========================================================================
    # SHUTDOWN
    # =========================================================================

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """
        Stop accepting jobs, run the backlog, and join every worker.

        ┌─────────────────────────────────────────────────────────────────┐
        │                    shutdown() Flow                               │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │   1. ACTIVE → DRAINING, close the queue                         │
        │          │   (execute() now raises PoolClosed)                  │
        │          ▼                                                       │
        │   2. Workers finish the backlog, then see the closed signal     │
        │          │                                                       │
        │          ▼                                                       │
        │   3. Join each worker thread                                    │
        │          │                                                       │
        │          ▼                                                       │
        │   4. DRAINING → STOPPED                                         │
        │                                                                  │
        └─────────────────────────────────────────────────────────────────┘

        Calling it again after STOPPED does nothing. Concurrent callers
        wait for the first one and return once the pool is stopped.

        Args:
            timeout: Seconds to wait for the workers. None waits as long
                     as the jobs take.

        Raises:
            ShutdownTimeout: If workers are still alive at the deadline.
                             The pool stays DRAINING; call shutdown()
                             again to keep waiting.
            PoolError: If called from one of this pool's own workers.
        """
        if threading.current_thread() in self._workers:
            raise PoolError("A worker cannot shut down its own pool")

        with self._shutdown_lock:
            if self._state is PoolState.STOPPED:
                return

            if self._state is PoolState.ACTIVE:
                logger.info(
                    f"Shutting down thread pool ({len(self._job_queue)} jobs pending)..."
                )
                self._state = PoolState.DRAINING
                self._job_queue.close()

            # ─────────────────────────────────────────────────────────────
            # WAIT FOR WORKERS TO EXIT
            # ─────────────────────────────────────────────────────────────
            # One deadline shared by all joins, not one timeout per worker.

            deadline = None if timeout is None else time.monotonic() + timeout
            for worker in self._workers:
                remaining = None if deadline is None else max(deadline - time.monotonic(), 0.0)
                worker.join(remaining)

            alive = self.alive_workers
            if alive:
                logger.warning(f"Shutdown timed out with {alive} worker(s) still running")
                raise ShutdownTimeout(alive, timeout)

            self._state = PoolState.STOPPED

        logger.info("Thread pool shutdown complete")

    def __enter__(self) -> "ThreadPool":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Leaving the block drains the pool, even on error."""
        self.shutdown()
        return False

    def __repr__(self) -> str:
        return f"<ThreadPool size={self._size} state={self._state.value}>"

    # =========================================================================
    # MONITORING: Check pool status
    # =========================================================================

    @property
    def size(self) -> int:
        """Number of workers, fixed at construction."""
        return self._size

    @property
    def state(self) -> PoolState:
        """Current lifecycle state."""
        return self._state

    @property
    def workers(self) -> tuple:
        """Snapshot of the worker threads."""
        return tuple(self._workers)

    @property
    def pending_jobs(self) -> int:
        """Approximate number of jobs waiting for a worker."""
        return len(self._job_queue)

    @property
    def alive_workers(self) -> int:
        """Get count of worker threads that have not exited."""
        return sum(1 for w in self._workers if w.is_alive())

    @property
    def busy_workers(self) -> int:
        """Get count of busy workers."""
        return sum(1 for w in self._workers if w.state is WorkerState.BUSY)

    @property
    def idle_workers(self) -> int:
        """Get count of idle workers."""
        return sum(1 for w in self._workers if w.state is WorkerState.IDLE)

    @property
    def stats(self) -> dict:
        """
        Get thread pool statistics.

        Returns a dict with worker and job counts, handy for logs and
        debugging. Values are read without locking and may be slightly
        stale while jobs are running.
        """
        return {
            "state": self._state.value,
            "workers": {
                "total": self._size,
                "alive": self.alive_workers,
                "busy": self.busy_workers,
                "idle": self.idle_workers,
            },
            "jobs": {
                "pending": self.pending_jobs,
                "completed": sum(w.jobs_completed for w in self._workers),
                "failed": sum(w.jobs_failed for w in self._workers),
            },
        }
