"""Equality comparers used to decide which values are equivalent."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from typing import Any, Sequence

_NAN = object()  # stands in for every NaN when hashing


def _is_nan(x: Any) -> bool:
    """Check if an element is a floating point NaN."""
    return isinstance(x, (float, complex, np.inexact)) and bool(x != x)


class DefaultComparer:
    """Compare values by `==` and the built-in `hash`."""

    def equals(self, a: Any, b: Any) -> bool:
        """Check if two values are equal."""
        return bool(a == b)

    def hash(self, value: Any) -> int:
        """Return the hash of a value."""
        return hash(value)

    def __repr__(self) -> str:
        """Return a string representation of the object."""
        return f"{self.__class__.__name__}()"


class IdentityComparer(DefaultComparer):
    """Compare values by identity.

    Note:
        Interning by identity never merges two distinct objects, so this is mostly useful for
        tracking which objects have already been seen.
    """

    def equals(self, a: Any, b: Any) -> bool:
        """Check if two values are the same object."""
        return a is b

    def hash(self, value: Any) -> int:
        """Return the hash of the identity of a value."""
        return id(value)


class SequenceComparer(DefaultComparer):
    """Compare sequences element by element.

    Lists, tuples and `numpy` arrays holding the same elements are equal to one another, which
    allows a mutable working buffer to be looked up against immutable canonical copies.
    NaN elements are equal to one another, so arrays of doubles holding NaN can still be merged.
    """

    def equals(self, a: Sequence[Any], b: Sequence[Any]) -> bool:
        """Check if two sequences hold equal elements.

        Args:
            a: First sequence.
            b: Second sequence.

        Returns:
            Whether the sequences are equal.
        """
        if a is b:
            return True
        if a is None or b is None:
            return False
        if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
            x, y = np.asarray(a), np.asarray(b)
            equal_nan = x.dtype.kind in "biufc" and y.dtype.kind in "biufc"
            return bool(np.array_equal(x, y, equal_nan=equal_nan))
        if len(a) != len(b):
            return False
        return all(x == y or (_is_nan(x) and _is_nan(y)) for x, y in zip(a, b))

    def hash(self, value: Sequence[Any]) -> int:
        """Return the hash of the elements of a sequence.

        Args:
            value: Sequence to hash.

        Returns:
            The integer hash of the sequence.
        """
        if value is None:
            return 0
        elements = value.ravel().tolist() if isinstance(value, np.ndarray) else value
        return hash(tuple(_NAN if _is_nan(x) else x for x in elements))
