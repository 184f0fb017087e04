"""
Order-preserving merge of per-chunk results.

Chunks are contiguous and ascending, and each chunk's primes are
ascending, so concatenating in chunk-index order yields the final
ascending list.
"""

from itertools import chain
from typing import List, Optional, Tuple

from .errors import WorkerFault
from .executor import ChunkResult


def aggregate(results: List[Optional[ChunkResult]]) -> Tuple[int, ...]:
    """
    Concatenate chunk results in index order.

    Parameters
    ----------
    results : list of ChunkResult
        results[i] must be the result of chunk i.

    Returns
    -------
    tuple
        All primes, ascending.

    Raises
    ------
    WorkerFault
        If a slot is empty or holds another chunk's result.
    """
    for position, result in enumerate(results):
        if result is None:
            raise WorkerFault(f"no result for chunk {position}")
        if result.index != position:
            raise WorkerFault(
                f"result of chunk {result.index} found at position {position}"
            )
    return tuple(chain.from_iterable(result.primes for result in results))
