"""
Figures printed by the test harness.

Precision and recall against the sequential baseline, the share of
primes in ascending order, the speedup and the estimated grade. Each
function here is the single place its figure is computed.
"""

import numpy as np
from typing import Dict, Sequence


def subtract(values: Sequence[int], other: Sequence[int]) -> np.ndarray:
    """
    Elements of `values` that do not appear in `other`.

    Parameters
    ----------
    values : sequence of int
        Values to filter, order and duplicates kept.
    other : sequence of int
        Values to remove.

    Returns
    -------
    np.ndarray
        Remaining values, in their original order.
    """
    values = np.asarray(values, dtype=np.int64)
    other = np.asarray(other, dtype=np.int64)
    return values[~np.isin(values, other)]


def precision_recall(reference: Sequence[int], computed: Sequence[int]) -> Dict[str, object]:
    """
    Compare a computed prime list against the reference one.

    Parameters
    ----------
    reference : sequence of int
        Primes from the sequential baseline.
    computed : sequence of int
        Primes under test.

    Returns
    -------
    dict
        false_positives, false_negatives (arrays), precision, recall
        (floats, nan when undefined).
    """
    false_positives = subtract(computed, reference)
    false_negatives = subtract(reference, computed)

    true_pos = len(computed) - len(false_positives)
    found = true_pos + len(false_positives)
    expected = true_pos + len(false_negatives)

    return {
        'false_positives': false_positives,
        'false_negatives': false_negatives,
        'precision': true_pos / found if found else np.nan,
        'recall': true_pos / expected if expected else np.nan,
    }


def sort_rate(values: Sequence[int]) -> float:
    """
    Fraction of elements that are not smaller than their predecessor.

    The first element counts as sorted. Lists with fewer than two
    elements score 0.0.
    """
    if len(values) <= 1:
        return 0.0
    values = np.asarray(values)
    in_order = 1 + int(np.sum(values[1:] >= values[:-1]))
    return in_order / len(values)


def speedup(reference_elapsed: float, computed_elapsed: float) -> float:
    """Reference time over computed time; inf when the computation took no time."""
    if computed_elapsed <= 0:
        return np.inf
    return reference_elapsed / computed_elapsed


def grade(precision: float, recall: float, sorted_rate: float,
          actual_speedup: float, solution_speedup: float) -> float:
    """
    Estimated grade out of 12.

    3 points for perfect precision, 3 for sorting, 6 scaled by speedup
    relative to the expected solution speedup; the total is then
    weighted by recall.
    """
    total = 0.0
    total += 3 * (0.0 if precision < 1.0 else 1.0)
    total += 3 * sorted_rate
    total += 6 * actual_speedup / solution_speedup
    return total * recall
