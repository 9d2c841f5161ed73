"""Containers providing a single instance of equal values."""

from __future__ import annotations

from collections.abc import Collection, Container, Iterable
from typing import TYPE_CHECKING, TypeVar

from canonset.index import HashIndex
from canonset.retention import StrongRetention, WeakRetention

if TYPE_CHECKING:
    from typing import Any, Optional

    from canonset.types import Comparer, KeyFactory

T = TypeVar("T")


class SingleValueSet(HashIndex[T], Collection[T]):
    """Container that provides a single instance of equal values.

    The container keeps a strong reference to every canonical value. To allow them to be garbage
    collected, `clear` the container or drop the container itself.

    Args:
        comparer: Comparer defining equivalence of values. Defaults to `DefaultComparer`.
        key_factory: Function creating an immutable key from a newly added value, or returning the
            value itself if it is already immutable. The key must be equal to the value and have
            the same hash.
        max_size: Largest size the table may grow to.

    Examples:
        >>> values = SingleValueSet()
        >>> a = values[("x", 1)]
        >>> values[("x", 1)] is a
        True
    """

    _retention: StrongRetention[T]

    def __init__(
        self,
        comparer: Optional[Comparer] = None,
        key_factory: Optional[KeyFactory[T]] = None,
        max_size: Optional[int] = None,
    ) -> None:
        """Initialise the object."""
        super().__init__(
            StrongRetention(), comparer=comparer, key_factory=key_factory, max_size=max_size
        )

    def __getitem__(self, value: T) -> T:
        """Get the single instance of a value, adding it if necessary."""
        return self.get(value)

    def add(self, value: T) -> None:
        """Add a value to the container, unless an equal value is already present."""
        self.get(value)

    def __contains__(self, value: Any) -> bool:
        """Check if a value equal to `value` is in the container."""
        found, _ = self.try_get(value)
        return found

    def __len__(self) -> int:
        """Get the number of values in the container."""
        return self._retention.count

    def __repr__(self) -> str:
        """Return a string representation of the object."""
        return f"{self.__class__.__name__}(count={len(self)}, size={self.size})"


class WeakSingleValueSet(HashIndex[T], Container[T], Iterable[T]):
    """Container that provides a single instance of equal values, without keeping them alive.

    The container only keeps a weak reference to each canonical value. Once a value is no longer
    used elsewhere it is dropped from the container, and the slot it occupied is reused the next
    time a lookup passes over it. Use `trim_excess` to drop all such values at once.

    Args:
        comparer: Comparer defining equivalence of values. Defaults to `DefaultComparer`.
        key_factory: Function creating the key to store from a newly added value. The key must be
            equal to the value, have the same hash, and support weak references.
        max_size: Largest size the table may grow to.

    Note:
        There is no `len`, since the number of values depends on the garbage collector.

        Values must support weak references. Built-in `str`, `int` and `tuple` values do not, so
        storing them raises `TypeError`; wrap them with a `key_factory` returning an equal,
        weak-referenceable object, or use `SingleValueSet`.
    """

    def __init__(
        self,
        comparer: Optional[Comparer] = None,
        key_factory: Optional[KeyFactory[T]] = None,
        max_size: Optional[int] = None,
    ) -> None:
        """Initialise the object."""
        super().__init__(
            WeakRetention(), comparer=comparer, key_factory=key_factory, max_size=max_size
        )

    def __getitem__(self, value: T) -> T:
        """Get the single instance of a value, adding it if necessary."""
        return self.get(value)

    def add(self, value: T) -> None:
        """Add a value to the container, unless an equal value is already present.

        Note:
            The value is only retained for as long as it is referenced elsewhere.
        """
        self.get(value)

    def __contains__(self, value: Any) -> bool:
        """Check if a live value equal to `value` is in the container."""
        found, _ = self.try_get(value)
        return found

    def __repr__(self) -> str:
        """Return a string representation of the object."""
        return f"{self.__class__.__name__}(size={self.size})"
