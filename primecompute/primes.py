"""
Prime testing utilities.

Responsibility: the trial-division oracle and the sequential reference
built on it. No partitioning, no pools.
"""

from math import isqrt
from typing import List

from .errors import InvalidInput


def is_prime(number: int) -> bool:
    """
    Check whether a natural number is prime by trial division.

    Parameters
    ----------
    number : int
        Natural number to test.

    Returns
    -------
    bool
        True iff number is prime.

    Raises
    ------
    InvalidInput
        If number is negative.
    """
    if number < 0:
        raise InvalidInput(f"number is not natural: {number}")
    if number < 2:
        return False
    if number == 2 or number == 3:
        return True
    if number % 2 == 0:
        return False
    limit = isqrt(number)
    for divisor in range(3, limit + 1, 2):
        if number % divisor == 0:
            return False
    return True


def primes_below(max_value: int) -> List[int]:
    """
    Return all primes < max_value, one candidate at a time.

    This is the single-threaded baseline the parallel engine is
    measured against.
    """
    return [candidate for candidate in range(1, max_value) if is_prime(candidate)]
