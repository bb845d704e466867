"""
Unit tests for the closable job queue.
"""

import threading
import time

import pytest

from webserver.core.errors import PoolClosed, PoolError
from webserver.core.job_queue import JobQueue


def noop():
    pass


class TestSubmitAndTake:
    """Tests for basic delivery."""

    def test_take_returns_jobs_in_submission_order(self):
        """A single producer's jobs come out FIFO."""
        jobs = JobQueue()
        first, second, third = (lambda: 1), (lambda: 2), (lambda: 3)

        jobs.submit(first)
        jobs.submit(second)
        jobs.submit(third)

        assert jobs.take() is first
        assert jobs.take() is second
        assert jobs.take() is third

    def test_len_counts_pending_jobs(self):
        """len() reports jobs not yet taken."""
        jobs = JobQueue()
        assert len(jobs) == 0

        jobs.submit(noop)
        jobs.submit(noop)
        assert len(jobs) == 2

        jobs.take()
        assert len(jobs) == 1

    def test_take_blocks_until_submit(self):
        """take() waits for a job instead of returning early."""
        jobs = JobQueue()
        taken = []
        taker = threading.Thread(target=lambda: taken.append(jobs.take()))
        taker.start()

        taker.join(timeout=0.2)
        assert taker.is_alive()

        jobs.submit(noop)
        taker.join(timeout=2.0)
        assert taken == [noop]


class TestClose:
    """Tests for closing the queue."""

    def test_submit_after_close_raises(self):
        """Closed queues reject jobs explicitly."""
        jobs = JobQueue()
        jobs.close()

        with pytest.raises(PoolClosed):
            jobs.submit(noop)

    def test_pool_closed_is_a_pool_error(self):
        """PoolClosed can be caught as PoolError or RuntimeError."""
        assert issubclass(PoolClosed, PoolError)
        assert issubclass(PoolClosed, RuntimeError)

    def test_backlog_is_delivered_before_closed_signal(self):
        """Jobs accepted before close() are still handed out."""
        jobs = JobQueue()
        jobs.submit(noop)
        jobs.submit(noop)
        jobs.close()

        assert jobs.take() is noop
        assert jobs.take() is noop
        assert jobs.take() is None

    def test_closed_signal_repeats(self):
        """Every take() after the drain reports closure."""
        jobs = JobQueue()
        jobs.close()

        assert jobs.take() is None
        assert jobs.take() is None
        assert len(jobs) == 0

    def test_close_is_idempotent(self):
        """Closing twice is harmless and does not add a second marker."""
        jobs = JobQueue()
        jobs.submit(noop)
        jobs.close()
        jobs.close()

        assert jobs.closed is True
        assert len(jobs) == 1

    def test_close_wakes_every_waiting_taker(self):
        """One close() releases all blocked takers."""
        jobs = JobQueue()
        results = []
        lock = threading.Lock()

        def take():
            job = jobs.take()
            with lock:
                results.append(job)

        takers = [threading.Thread(target=take) for _ in range(5)]
        for t in takers:
            t.start()

        jobs.close()
        for t in takers:
            t.join(timeout=2.0)

        assert not any(t.is_alive() for t in takers)
        assert results == [None] * 5


class TestConcurrentProducers:
    """Tests for many producers and consumers."""

    def test_each_job_delivered_exactly_once(self):
        """Concurrent producers and consumers neither lose nor repeat jobs."""
        jobs = JobQueue()
        delivered = []
        lock = threading.Lock()

        def produce(base):
            for i in range(200):
                jobs.submit(lambda n=base + i: n)

        def consume():
            while True:
                job = jobs.take()
                if job is None:
                    return
                with lock:
                    delivered.append(job())

        consumers = [threading.Thread(target=consume) for _ in range(4)]
        producers = [threading.Thread(target=produce, args=(p * 1000,)) for p in range(3)]
        for t in consumers + producers:
            t.start()
        for t in producers:
            t.join()

        jobs.close()
        for t in consumers:
            t.join(timeout=5.0)

        expected = [p * 1000 + i for p in range(3) for i in range(200)]
        assert sorted(delivered) == expected

    def test_submit_racing_close_is_delivered_or_rejected(self):
        """Jobs accepted while close() runs are all delivered, rejected ones never are."""
        jobs = JobQueue()
        accepted = []
        delivered = []
        lock = threading.Lock()
        start = threading.Event()

        def produce(base):
            start.wait()
            for i in range(2000):
                n = base + i
                try:
                    jobs.submit(lambda n=n: n)
                except PoolClosed:
                    return
                with lock:
                    accepted.append(n)

        def consume():
            while True:
                job = jobs.take()
                if job is None:
                    return
                with lock:
                    delivered.append(job())

        def close_soon():
            start.wait()
            time.sleep(0.005)
            jobs.close()

        consumers = [threading.Thread(target=consume) for _ in range(3)]
        producers = [threading.Thread(target=produce, args=(p * 10000,)) for p in range(4)]
        closer = threading.Thread(target=close_soon)
        for t in consumers + producers + [closer]:
            t.start()
        start.set()

        for t in producers + [closer] + consumers:
            t.join(timeout=10.0)

        assert not any(t.is_alive() for t in consumers)
        assert sorted(delivered) == sorted(accepted)
        assert len(set(delivered)) == len(delivered)
