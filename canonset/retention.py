"""Strategies for retaining the keys stored in a hash index."""

from __future__ import annotations

import weakref
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from typing import Any, Optional

T = TypeVar("T")


class Retention(ABC, Generic[T]):
    """Base class for key retention strategies.

    A retention strategy owns the cell stored in each occupied slot of a `HashIndex`. The index
    never looks inside a cell; it only asks the strategy to create one for a key, to release it,
    and to resolve it back to the key.
    """

    @abstractmethod
    def assign(self, key: T) -> Any:
        """Create a cell retaining a key.

        Args:
            key: The key to retain.

        Returns:
            The cell to store in the slot.
        """
        pass

    @abstractmethod
    def release(self, cell: Any) -> None:
        """Release a cell previously returned by `assign`.

        Args:
            cell: The cell to release. Each cell is released at most once.
        """
        pass

    @abstractmethod
    def resolve(self, cell: Any) -> tuple[bool, Optional[T]]:
        """Get the key retained by a cell.

        Args:
            cell: The cell to resolve.

        Returns:
            Whether the key is still available, and the key if it is.
        """
        pass


class StrongRetention(Retention[T]):
    """Retain keys by holding them directly.

    Resolving always succeeds. The strategy also keeps count of the cells it has handed out and
    not yet had released, which is exactly the number of entries in the index.
    """

    def __init__(self) -> None:
        """Initialise the object."""
        self.count = 0

    def assign(self, key: T) -> T:
        """Create a cell retaining a key."""
        self.count += 1
        return key

    def release(self, cell: T) -> None:
        """Release a cell previously returned by `assign`."""
        self.count -= 1

    def resolve(self, cell: T) -> tuple[bool, Optional[T]]:
        """Get the key retained by a cell."""
        return True, cell


class WeakRetention(Retention[T]):
    """Retain keys through weak references.

    A key stays resolvable only while something outside the index holds a strong reference to
    it. Once the key has been collected the cell never resolves again, and it is up to the index
    to reclaim the slot.
    """

    def assign(self, key: T) -> weakref.ref[Any]:
        """Create a cell retaining a key.

        Raises:
            TypeError: If the key does not support weak references.
        """
        try:
            return weakref.ref(key)
        except TypeError as e:
            raise TypeError(
                f"Values of type {type(key).__name__} cannot be weakly referenced; use a key "
                "factory that returns a weak-referenceable equivalent."
            ) from e

    def release(self, cell: weakref.ref[Any]) -> None:
        """Release a cell previously returned by `assign`."""
        assert isinstance(cell, weakref.ref), "Only assigned cells can be released"

    def resolve(self, cell: weakref.ref[Any]) -> tuple[bool, Optional[T]]:
        """Get the key retained by a cell, if it is still alive."""
        key = cell()
        if key is None:
            return False, None
        return True, key
