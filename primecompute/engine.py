"""
Parallel prime computation.

compute_primes(max) returns every prime < max, ascending, using a pool
sized to the machine's cores. Each call partitions the domain, scans
the chunks on its own pool and merges the results by chunk index; the
pool is gone by the time the call returns.
"""

from typing import Callable, Optional, Tuple

from .aggregate import aggregate
from .config import EngineConfig
from .errors import InvalidInput
from .executor import ChunkResult, run_all
from .partition import partition
from .primes import is_prime


class PrimeEngine:
    """
    Computes primes below a bound with a fixed configuration.

    Parameters
    ----------
    config : EngineConfig
        Worker count, backend and partitioning settings.
    progress : callable, optional
        Called once per finished chunk with its ChunkResult.
    oracle : callable
        Primality test applied to every candidate. Must be picklable
        for the process backend.
    """

    def __init__(self, config: EngineConfig,
                 progress: Optional[Callable[[ChunkResult], None]] = None,
                 oracle: Callable[[int], bool] = is_prime):
        self.config = config.validate()
        self.progress = progress
        self.oracle = oracle

    def compute_primes(self, max_value: int) -> Tuple[int, ...]:
        """Return all primes < max_value in ascending order."""
        if isinstance(max_value, bool) or not isinstance(max_value, int):
            raise InvalidInput(f"bound must be an integer, got {max_value!r}")
        if max_value < 0:
            raise InvalidInput(f"bound is not natural: {max_value}")
        if max_value <= 1:
            return ()

        config = self.config
        chunks = partition(max_value, config.workers,
                           oversubscription=config.oversubscription,
                           cost_model=config.cost_model)
        results = run_all(chunks, config.workers, backend=config.backend, oracle=self.oracle,
                          progress=self.progress, verbose=config.verbose)
        primes = aggregate(results)

        if config.verbose:
            print(f"    Found {len(primes):,} primes below {max_value:,}")

        return primes


def compute_primes(max_value: int, config: Optional[EngineConfig] = None) -> Tuple[int, ...]:
    """
    Efficiently compute the primes below max_value (excluded).

    Parameters
    ----------
    max_value : int
        Upper bound of primes.
    config : EngineConfig, optional
        Defaults to one worker per CPU core.

    Returns
    -------
    tuple
        Primes in ascending order.
    """
    if config is None:
        config = EngineConfig()
    return PrimeEngine(config).compute_primes(max_value)
