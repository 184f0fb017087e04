"""
Correctness and performance test of the parallel engine.

Runs the sequential baseline and the engine on the same bound, then
reports precision, recall, ordering and speedup.
"""

import time
import numpy as np
import pandas as pd
from typing import Callable, Iterable, List, NamedTuple

from .config import EngineConfig
from .engine import PrimeEngine
from .metrics import grade, precision_recall, sort_rate, speedup
from .primes import primes_below


class TestResult(NamedTuple):
    primes: List[int]
    elapsed: float
    timings: pd.DataFrame


def perform_test(description: str, max_value: int, iterations: int,
                 method: Callable[[int], Iterable[int]]) -> TestResult:
    """
    Run `method(max_value)` `iterations` times and time the whole loop.

    Parameters
    ----------
    description : str
        Name printed in the report.
    max_value : int
        Bound passed to method.
    iterations : int
        Number of runs; the primes of the last run are kept.
    method : callable
        Function from a bound to an iterable of primes.

    Returns
    -------
    TestResult
        Primes of the last run, total elapsed seconds, per-run timings.
    """
    print(f"testing {description}...")

    primes: Iterable[int] = []
    rows = []
    start = time.perf_counter()
    for i in range(iterations):
        print(f"- iteration #{i}")
        t0 = time.perf_counter()
        primes = method(max_value)
        rows.append({'iteration': i, 'seconds': time.perf_counter() - t0})
    elapsed = time.perf_counter() - start
    primes = list(primes)

    print(f"#primes: {len(primes):,}")
    print(f"elapsed: {elapsed * 1000:.0f} ms")

    timings = pd.DataFrame(rows, columns=['iteration', 'seconds'])
    return TestResult(primes, elapsed, timings)


def _format_values(values: np.ndarray, limit: int = 20) -> str:
    shown = ', '.join(str(v) for v in values[:limit])
    if len(values) > limit:
        shown += f', ... ({len(values) - limit} more)'
    return f'[{shown}]'


def compare_results(reference: TestResult, computed: TestResult,
                    processors: int) -> pd.DataFrame:
    """
    Print the correctness and performance report.

    Parameters
    ----------
    reference : TestResult
        Sequential baseline run.
    computed : TestResult
        Engine run.
    processors : int
        Worker count used, the maximum theoretical speedup.

    Returns
    -------
    pd.DataFrame
        One-row summary of every reported figure.
    """
    print("correctness:")
    pr = precision_recall(reference.primes, computed.primes)
    print(f"- precision = {int(100 * np.nan_to_num(pr['precision']))}%"
          f", false positives = {_format_values(pr['false_positives'])}")
    print(f"- recall = {int(100 * np.nan_to_num(pr['recall']))}%"
          f", false negatives = {_format_values(pr['false_negatives'])}")

    sorted_rate = sort_rate(computed.primes)
    print(f"- primes are sorted = {int(100 * sorted_rate)}%")

    print("performance:")
    actual = speedup(reference.elapsed, computed.elapsed)
    max_speedup = float(processors)
    solution_speedup = max_speedup / 2  # estimated
    print(f"- maximum theoretical speedup = {max_speedup}")
    print(f"- ESTIMATED solution speedup = {solution_speedup}")
    print(f"- actual speedup = {actual:.2f}")

    estimated = grade(pr['precision'], pr['recall'], sorted_rate, actual, solution_speedup)
    print(f"*ESTIMATED* grade = {int(np.nan_to_num(estimated))} / 12")

    return pd.DataFrame([{
        'primes': len(computed.primes),
        'false_positives': len(pr['false_positives']),
        'false_negatives': len(pr['false_negatives']),
        'precision': pr['precision'],
        'recall': pr['recall'],
        'sort_rate': sorted_rate,
        'reference_seconds': reference.elapsed,
        'computed_seconds': computed.elapsed,
        'speedup': actual,
        'max_speedup': max_speedup,
        'grade': estimated,
    }])


def run_test(max_value: int, iterations: int, config: EngineConfig) -> pd.DataFrame:
    """Baseline run, engine run, comparison."""
    reference = perform_test('primes_below', max_value, iterations, primes_below)

    engine = PrimeEngine(config)
    computed = perform_test('compute_primes', max_value, iterations, engine.compute_primes)

    return compare_results(reference, computed, config.workers)
