"""
Cost-balanced partitioning of the candidate domain.

Trial division gets more expensive as candidates grow, so equal-width
chunks leave the workers holding small numbers idle while the ones
holding large numbers are still busy. Chunks are instead cut on the
running sum of an estimated per-candidate cost, so every chunk carries
roughly the same estimated work.

Cost models:
- linear  : cost(i) = i
- sqrt    : cost(i) = sqrt(i), the number of divisors trial division may try
- uniform : cost(i) = 1, plain equal-width chunks

Chunks cover [1, N) exactly: no gaps, no overlaps, ordered by index.
"""

import numpy as np
from typing import List, NamedTuple

from .errors import InvalidInput

COST_MODELS = ('linear', 'sqrt', 'uniform')

# Candidates per cost block while scanning for cut points
BLOCK_SIZE = 1 << 16


class Chunk(NamedTuple):
    """Half-open candidate range [lo, hi) at position `index` in the output."""
    index: int
    lo: int
    hi: int

    @property
    def size(self) -> int:
        return self.hi - self.lo


def _check_cost_model(cost_model: str):
    if cost_model not in COST_MODELS:
        raise InvalidInput(
            f"unknown cost model {cost_model!r}, expected one of {COST_MODELS}"
        )


def estimate_costs(lo: int, hi: int, cost_model: str = 'linear') -> np.ndarray:
    """
    Estimated trial-division cost of every candidate in [lo, hi).

    Parameters
    ----------
    lo, hi : int
        Candidate range, half-open.
    cost_model : str
        One of COST_MODELS.

    Returns
    -------
    np.ndarray
        float64 array of length hi - lo.
    """
    _check_cost_model(cost_model)
    if lo < 0 or hi < lo:
        raise InvalidInput(f"invalid candidate range [{lo}, {hi})")

    if cost_model == 'uniform':
        return np.ones(hi - lo, dtype=np.float64)

    costs = np.arange(lo, hi, dtype=np.float64)
    if cost_model == 'sqrt':
        np.sqrt(costs, out=costs)
    return costs


def partition(N: int, worker_count: int, oversubscription: int = 4,
              cost_model: str = 'linear') -> List[Chunk]:
    """
    Split [1, N) into contiguous chunks of roughly equal estimated cost.

    Parameters
    ----------
    N : int
        Upper bound of the domain (excluded).
    worker_count : int
        Number of workers the chunks are meant for.
    oversubscription : int
        Chunks per worker. More chunks let early finishers pick up
        remaining work when the cost estimate is off.
    cost_model : str
        One of COST_MODELS.

    Returns
    -------
    list of Chunk
        At most worker_count * oversubscription chunks, empty when N <= 1.
    """
    if worker_count <= 0:
        raise InvalidInput(f"worker count must be positive, got {worker_count}")
    if oversubscription <= 0:
        raise InvalidInput(f"oversubscription must be positive, got {oversubscription}")
    _check_cost_model(cost_model)

    if N <= 1:
        return []

    max_chunks = worker_count * oversubscription
    target = total_cost(1, N, cost_model) / max_chunks

    # Running cost is scanned one block at a time; memory stays O(block)
    bounds = [1]
    running = 0.0
    lo = 1
    while lo < N and len(bounds) < max_chunks:
        hi = min(lo + BLOCK_SIZE, N)
        cumulative = estimate_costs(lo, hi, cost_model)
        np.cumsum(cumulative, out=cumulative)
        base = 0.0
        while len(bounds) < max_chunks:
            # First offset where the running cost since the chunk start exceeds the target
            cut = int(np.searchsorted(cumulative, base + target - running, side='right'))
            if cut >= len(cumulative):
                break
            bounds.append(lo + cut + 1)
            running = 0.0
            base = cumulative[cut]
        running += cumulative[-1] - base
        lo = hi

    # The last chunk always closes at N
    if bounds[-1] != N:
        bounds.append(N)
    return [Chunk(i, start, end) for i, (start, end) in enumerate(zip(bounds, bounds[1:]))]


def total_cost(lo: int, hi: int, cost_model: str = 'linear') -> float:
    """
    Estimated cost of all candidates in [lo, hi).

    Closed form for the linear and uniform models; the sqrt model is
    summed block by block.
    """
    _check_cost_model(cost_model)
    if hi <= lo:
        return 0.0
    if cost_model == 'uniform':
        return float(hi - lo)
    if cost_model == 'linear':
        return float((hi - 1) * hi // 2 - (lo - 1) * lo // 2)
    return float(sum(estimate_costs(start, min(start + BLOCK_SIZE, hi), cost_model).sum()
                     for start in range(lo, hi, BLOCK_SIZE)))


def chunk_costs(chunks: List[Chunk], cost_model: str = 'linear') -> np.ndarray:
    """Estimated cost of each chunk under `cost_model`."""
    _check_cost_model(cost_model)
    return np.array(
        [estimate_costs(c.lo, c.hi, cost_model).sum() for c in chunks],
        dtype=np.float64,
    )
