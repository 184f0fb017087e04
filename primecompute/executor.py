"""
Worker pool that scans chunks of candidates in parallel.

One pool is created per run_all call and joined before it returns,
whether the chunks succeed or not. Results are placed by chunk index,
so completion order never leaks into the output.

Backends:
- process : multiprocessing.Pool, real multi-core speedup under the GIL
- thread  : multiprocessing.pool.ThreadPool, same API; scales on
            free-threaded builds and accepts unpicklable oracles
"""

from multiprocessing import Pool
from multiprocessing.pool import ThreadPool
from typing import Callable, List, NamedTuple, Optional, Tuple

from .errors import InvalidInput, WorkerFault
from .partition import Chunk
from .primes import is_prime

BACKENDS = ('process', 'thread')


class ChunkResult(NamedTuple):
    """Ascending primes found in the chunk at position `index`."""
    index: int
    primes: Tuple[int, ...]


def scan_chunk(args: Tuple[Chunk, Callable[[int], bool]]) -> ChunkResult:
    """
    Apply the oracle to every candidate of one chunk, in ascending order.

    Runs inside a worker; the accumulator is private to this call.
    """
    chunk, oracle = args
    primes = [candidate for candidate in range(chunk.lo, chunk.hi) if oracle(candidate)]
    return ChunkResult(chunk.index, tuple(primes))


def _make_pool(backend: str, processes: int):
    if backend == 'process':
        return Pool(processes)
    return ThreadPool(processes)


def run_all(chunks: List[Chunk], workers: int, backend: str = 'process',
            oracle: Callable[[int], bool] = is_prime,
            progress: Optional[Callable[[ChunkResult], None]] = None,
            verbose: bool = False) -> List[ChunkResult]:
    """
    Scan every chunk on a fixed-size pool and return index-aligned results.

    Parameters
    ----------
    chunks : list of Chunk
        Chunks to scan; chunks[i].index must equal i.
    workers : int
        Maximum number of execution units in the pool.
    backend : str
        'process' or 'thread'.
    oracle : callable
        Primality test applied to each candidate. Must be picklable
        for the process backend.
    progress : callable, optional
        Called with each ChunkResult in the calling thread, in
        completion order.
    verbose : bool
        Print a status line before dispatching.

    Returns
    -------
    list of ChunkResult
        results[i] belongs to chunks[i].

    Raises
    ------
    WorkerFault
        If any task (or the progress hook) fails. The pool has been
        terminated and joined by the time this is raised.
    """
    if workers <= 0:
        raise InvalidInput(f"worker count must be positive, got {workers}")
    if backend not in BACKENDS:
        raise InvalidInput(f"unknown backend {backend!r}, expected one of {BACKENDS}")
    if not chunks:
        return []

    processes = min(workers, len(chunks))
    if verbose:
        print(f"    Processing {len(chunks)} chunks with {processes} {backend} workers...")

    tasks = [(chunk, oracle) for chunk in chunks]
    slots: List[Optional[ChunkResult]] = [None] * len(chunks)

    pool = _make_pool(backend, processes)
    finished = False
    try:
        for result in pool.imap_unordered(scan_chunk, tasks):
            slots[result.index] = result
            if progress is not None:
                progress(result)
        finished = True
    except Exception as exc:
        raise WorkerFault(f"chunk task failed: {exc!r}") from exc
    finally:
        if finished:
            pool.close()
        else:
            pool.terminate()
        pool.join()

    return slots
