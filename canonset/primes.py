"""Prime sizes for hash tables."""

from __future__ import annotations

import bisect
import math
from typing import TYPE_CHECKING

import canonset

if TYPE_CHECKING:
    from typing import Optional

PRIMES: tuple[int, ...] = (
    3, 7, 13, 23, 41, 73, 131, 233, 409, 719, 1259, 2207, 3863, 6761, 11833, 20717,
    36263, 63463, 111091, 194413, 340237, 595451, 1042043, 1823579, 3191281,
    5584751, 9773329, 17103337, 29930851, 52379039, 91663321, 160410823,
    280718953, 491258171, 859701809, 1504478191, 2147483647,
)  # fmt: skip
"""Ascending table sizes, each roughly 1.75 times the previous."""


def is_prime(candidate: int) -> bool:
    """Check whether a number is prime by trial division.

    Args:
        candidate: The number to check.

    Returns:
        Whether the number is prime.
    """
    if candidate > 2 and candidate & 1:
        limit = math.isqrt(candidate)
        for divisor in range(3, limit + 1, 2):
            if candidate % divisor == 0:
                return False
        return True
    return candidate == 2


def next_prime(value: int, maximum: Optional[int] = None) -> int:
    """Get the smallest usable table size that is at least `value`.

    Args:
        value: The minimum required size.
        maximum: The largest acceptable size. Defaults to `canonset.MAX_TABLE_SIZE`.

    Returns:
        A prime number no smaller than `value`.

    Raises:
        OverflowError: If no prime between `value` and `maximum` exists.

    Note:
        Sizes are taken from the curated `PRIMES` table where possible, and found by trial
        division above its range, or when `maximum` falls between two table sizes.
    """
    if maximum is None:
        maximum = canonset.MAX_TABLE_SIZE

    position = bisect.bisect_left(PRIMES, value)
    if position < len(PRIMES) and PRIMES[position] <= maximum:
        return PRIMES[position]

    # Beyond the table, or a maximum that falls between two table sizes
    candidate = max(value, 2) | 1
    while candidate <= maximum:
        if is_prime(candidate):
            return candidate
        candidate += 2

    raise OverflowError(f"No prime table size between {value} and {maximum}.")
