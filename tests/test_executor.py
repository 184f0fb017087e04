"""
Tests for the worker pool and the order-preserving merge.

Pool teardown is checked by comparing live threads and child processes
before and after each run.
"""

import multiprocessing
import threading
import time

import pytest

from primecompute.aggregate import aggregate
from primecompute.errors import InvalidInput, WorkerFault
from primecompute.executor import ChunkResult, run_all, scan_chunk
from primecompute.partition import Chunk, partition
from primecompute.primes import is_prime, primes_below


def assert_no_leaked_threads(before):
    leaked = set(threading.enumerate()) - before
    assert not leaked, f"threads still alive after run_all: {leaked}"


class TestScanChunk:

    def test_primes_in_chunk(self):
        result = scan_chunk((Chunk(0, 1, 20), is_prime))
        assert result == ChunkResult(0, (2, 3, 5, 7, 11, 13, 17, 19))

    def test_keeps_chunk_index(self):
        result = scan_chunk((Chunk(7, 90, 100), is_prime))
        assert result.index == 7
        assert result.primes == (97,)

    def test_chunk_without_primes(self):
        assert scan_chunk((Chunk(3, 24, 29), is_prime)).primes == ()

    def test_uses_given_oracle(self):
        result = scan_chunk((Chunk(0, 0, 10), lambda n: n % 3 == 0))
        assert result.primes == (0, 3, 6, 9)


class TestRunAllThreads:
    """Thread backend: accepts closures, easy to inspect."""

    def test_results_are_index_aligned(self):
        chunks = partition(5_000, 4, oversubscription=4)
        results = run_all(chunks, 4, backend='thread')

        assert len(results) == len(chunks)
        for chunk, result in zip(chunks, results):
            assert result.index == chunk.index
            assert list(result.primes) == [p for p in primes_below(chunk.hi) if p >= chunk.lo]

    def test_order_does_not_follow_completion(self):
        """The first chunk finishes last but still comes first."""
        def slow_start(n):
            if n < 10:
                time.sleep(0.02)
            return is_prime(n)

        chunks = [Chunk(0, 1, 10), Chunk(1, 10, 20), Chunk(2, 20, 30)]
        finished = []
        results = run_all(chunks, 3, backend='thread', oracle=slow_start,
                          progress=lambda r: finished.append(r.index))

        assert finished[-1] == 0, f"completion order was {finished}"
        assert [r.index for r in results] == [0, 1, 2]
        assert aggregate(results) == (2, 3, 5, 7, 11, 13, 17, 19, 23, 29)

    def test_progress_called_once_per_chunk(self):
        chunks = partition(2_000, 2, oversubscription=3)
        seen = []
        run_all(chunks, 2, backend='thread', progress=lambda r: seen.append(r.index))
        assert sorted(seen) == list(range(len(chunks)))

    def test_empty_chunks(self):
        assert run_all([], 4, backend='thread') == []

    def test_more_workers_than_chunks(self):
        results = run_all([Chunk(0, 1, 10)], 64, backend='thread')
        assert results == [ChunkResult(0, (2, 3, 5, 7))]

    def test_threads_are_joined(self):
        before = set(threading.enumerate())
        run_all(partition(3_000, 4), 4, backend='thread')
        assert_no_leaked_threads(before)


class TestRunAllFailures:
    """A failing task aborts the run after the pool is torn down."""

    def test_oracle_failure_raises_worker_fault(self):
        def exploding(n):
            if n == 500:
                raise RuntimeError("boom")
            return is_prime(n)

        before = set(threading.enumerate())
        with pytest.raises(WorkerFault) as excinfo:
            run_all(partition(1_000, 2), 2, backend='thread', oracle=exploding)

        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert_no_leaked_threads(before)

    def test_progress_failure_raises_worker_fault(self):
        def failing_hook(result):
            raise KeyError(result.index)

        before = set(threading.enumerate())
        with pytest.raises(WorkerFault):
            run_all(partition(1_000, 2), 2, backend='thread', progress=failing_hook)
        assert_no_leaked_threads(before)

    def test_process_failure_raises_worker_fault(self):
        """Negative candidates make the oracle fail inside a worker process."""
        chunks = [Chunk(0, 1, 10), Chunk(1, -3, 1)]
        with pytest.raises(WorkerFault) as excinfo:
            run_all(chunks, 2, backend='process')

        assert isinstance(excinfo.value.__cause__, InvalidInput)
        assert multiprocessing.active_children() == []

    @pytest.mark.parametrize("workers", [0, -2])
    def test_non_positive_workers(self, workers):
        with pytest.raises(InvalidInput):
            run_all([Chunk(0, 1, 10)], workers)

    def test_unknown_backend(self):
        with pytest.raises(InvalidInput):
            run_all([Chunk(0, 1, 10)], 2, backend='gpu')


class TestRunAllProcesses:

    def test_matches_baseline(self):
        chunks = partition(20_000, 2, oversubscription=4)
        results = run_all(chunks, 2, backend='process')
        assert [r.index for r in results] == list(range(len(chunks)))
        assert list(aggregate(results)) == primes_below(20_000)

    def test_children_are_reaped(self):
        run_all(partition(5_000, 2), 2, backend='process')
        assert multiprocessing.active_children() == []


class TestAggregate:

    def test_concatenates_in_index_order(self):
        results = [ChunkResult(0, (2, 3)), ChunkResult(1, ()), ChunkResult(2, (5, 7))]
        assert aggregate(results) == (2, 3, 5, 7)

    def test_empty(self):
        assert aggregate([]) == ()

    def test_result_is_restartable(self):
        primes = aggregate([ChunkResult(0, (2, 3, 5))])
        assert list(primes) == list(primes)

    def test_missing_result(self):
        with pytest.raises(WorkerFault):
            aggregate([ChunkResult(0, (2,)), None])

    def test_misplaced_result(self):
        with pytest.raises(WorkerFault):
            aggregate([ChunkResult(1, (5,)), ChunkResult(0, (2, 3))])
