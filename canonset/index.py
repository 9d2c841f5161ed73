"""Hash index handing out canonical instances of equal values."""

from __future__ import annotations

import warnings
from typing import TYPE_CHECKING, Generic, TypeVar

import numpy as np

import canonset
from canonset.comparer import DefaultComparer
from canonset.primes import next_prime

if TYPE_CHECKING:
    from typing import Any, Iterator, Optional

    from numpy.typing import NDArray

    from canonset.retention import Retention
    from canonset.types import Comparer, KeyFactory

T = TypeVar("T")

_NONE = -1
_HASH_MASK = 0xFFFFFFFFFFFFFFFF


class KeyContractError(ValueError):
    """Error raised when a key factory returns a key that is not equivalent to its input."""

    pass


def _is_mutable(value: Any) -> bool:
    """Check if a value is a visibly mutable container."""
    if isinstance(value, np.ndarray):
        return bool(value.flags.writeable)
    return isinstance(value, (list, dict, set, bytearray))


def _link_chains(
    hashes: NDArray[np.uint64], count: int, size: int
) -> tuple[NDArray[np.int64], NDArray[np.int64]]:
    """Link the first `count` slots into bucket chains.

    The result is the same as inserting slots `0, 1, ..., count - 1` in turn at the head of their
    chains, so every chain runs from its highest slot index down to its lowest.

    Args:
        hashes: Cached hashes of the slots.
        count: Number of occupied slots, all at the start of the slot arrays.
        size: Number of buckets.

    Returns:
        The bucket heads and the chain links of all slots.
    """
    buckets = np.full(size, _NONE, dtype=np.int64)
    links = np.full(len(hashes), _NONE, dtype=np.int64)
    if count == 0:
        return buckets, links

    positions = (hashes[:count] % np.uint64(size)).astype(np.int64)
    order = np.argsort(positions, kind="stable")
    grouped = positions[order]

    # Each slot links to the previous slot of its bucket in index order
    follows = grouped[1:] == grouped[:-1]
    links[order[1:][follows]] = order[:-1][follows]

    # The last slot of each bucket in index order is its head
    last = np.ones(count, dtype=bool)
    last[:-1] = ~follows
    buckets[grouped[last]] = order[last]

    return buckets, links


class HashIndex(Generic[T]):
    """Hash index of canonical values.

    Slots live in parallel arrays (cached hash, link to the next slot, retention cell) and are
    chained from a prime-sized bucket array. Vacated slots are threaded onto a free list and
    reused before the arrays grow. How the stored keys are held is left to a `Retention`
    strategy; slots whose key can no longer be resolved are reclaimed whenever a lookup walks
    past them.

    Args:
        retention: Strategy used to retain the stored keys.
        comparer: Comparer defining equivalence of values. Defaults to `DefaultComparer`.
        key_factory: Function creating the key to store from a newly added value. The key must
            be equal to the value and have the same hash. Defaults to storing the value itself.
        max_size: Largest size the table may grow to. Defaults to `canonset.MAX_TABLE_SIZE`.
    """

    _buckets: Optional[NDArray[np.int64]]
    _hashes: Optional[NDArray[np.uint64]]
    _links: Optional[NDArray[np.int64]]
    _cells: list[Any]
    _used: int
    _free: int

    def __init__(
        self,
        retention: Retention[T],
        comparer: Optional[Comparer] = None,
        key_factory: Optional[KeyFactory[T]] = None,
        max_size: Optional[int] = None,
    ) -> None:
        """Initialise the object."""
        self._retention = retention
        self._comparer = comparer if comparer is not None else DefaultComparer()
        self._key_factory = key_factory
        self._max_size = max_size
        self._reset()

    @property
    def comparer(self) -> Comparer:
        """Get the comparer defining equivalence of values."""
        return self._comparer

    @property
    def key_factory(self) -> Optional[KeyFactory[T]]:
        """Get the default key factory."""
        return self._key_factory

    @property
    def size(self) -> int:
        """Get the number of buckets, or zero if the table is not allocated."""
        return len(self._buckets) if self._buckets is not None else 0

    @property
    def max_size(self) -> int:
        """Get the largest size the table may grow to."""
        return self._max_size if self._max_size is not None else canonset.MAX_TABLE_SIZE

    def _reset(self) -> None:
        """Discard the table."""
        self._buckets = None
        self._hashes = None
        self._links = None
        self._cells = []
        self._used = 0
        self._free = _NONE

    def _initialise(self) -> None:
        """Allocate a table of the initial size."""
        size = next_prime(canonset.INITIAL_SIZE, self.max_size)
        self._buckets = np.full(size, _NONE, dtype=np.int64)
        self._hashes = np.zeros(size, dtype=np.uint64)
        self._links = np.full(size, _NONE, dtype=np.int64)
        self._cells = [None] * size
        self._used = 0
        self._free = _NONE

    def _hash(self, value: Any) -> int:
        """Return the hash of a value, as stored in the slots."""
        return self._comparer.hash(value) & _HASH_MASK

    def _chain(self) -> Iterator[int]:
        """Iterate over the indices of all slots in the bucket chains."""
        buckets, links = self._buckets, self._links
        if buckets is None or links is None:
            return
        for head in buckets:
            index = int(head)
            while index != _NONE:
                yield index
                index = int(links[index])

    def _find(self, value: Any, hash_code: int) -> tuple[int, int, int, Optional[T]]:
        """Find the slot holding a value.

        Slots whose key can no longer be resolved are reclaimed as the chain is walked.

        Args:
            value: The value to look for.
            hash_code: The stored hash of the value.

        Returns:
            The bucket of the value, the index of the matching slot (or -1), the index of the
            slot preceding it in the chain (or -1 if it is the head), and the stored key.
        """
        assert self._buckets is not None and self._links is not None and self._hashes is not None
        bucket = hash_code % len(self._buckets)
        prev = _NONE
        index = int(self._buckets[bucket])
        while index != _NONE:
            following = int(self._links[index])
            found, key = self._retention.resolve(self._cells[index])
            if not found:
                self._free_slot(index, prev, bucket)
            elif int(self._hashes[index]) == hash_code and self._comparer.equals(key, value):
                return bucket, index, prev, key
            else:
                prev = index
            index = following
        return bucket, _NONE, prev, None

    def _free_slot(self, index: int, prev: int, bucket: int) -> None:
        """Release a slot, unlink it from its chain and push it onto the free list."""
        assert self._buckets is not None and self._links is not None
        self._retention.release(self._cells[index])
        self._cells[index] = None
        if prev != _NONE:
            self._links[prev] = self._links[index]
        else:
            self._buckets[bucket] = self._links[index]
        self._links[index] = self._free
        self._free = index

    def _allocate(self) -> int:
        """Take a slot from the free list, or from the unused end of the slot arrays."""
        assert self._links is not None
        if self._free != _NONE:
            index = self._free
            self._free = int(self._links[index])
            return index
        if self._used >= len(self._cells):
            self._expand()
        index = self._used
        self._used += 1
        return index

    def _expand(self) -> None:
        """Grow the table to a prime size at least twice the current one.

        Raises:
            OverflowError: If the doubled size exceeds the maximum size.
        """
        assert self._buckets is not None and self._hashes is not None
        assert self._free == _NONE and self._used >= len(self._cells), "Expanding a table with space"

        size = len(self._buckets) * 2
        if size > self.max_size:
            raise OverflowError(f"Table cannot grow beyond {self.max_size} slots.")
        size = next_prime(size, self.max_size)

        # Slots keep their index, only the chains are rebuilt. The bucket count must be prime; the
        # slot arrays simply follow it.
        hashes = np.zeros(size, dtype=np.uint64)
        hashes[: self._used] = self._hashes[: self._used]
        buckets, links = _link_chains(hashes, self._used, size)
        cells = self._cells + [None] * (size - len(self._cells))

        self._buckets = buckets
        self._hashes = hashes
        self._links = links
        self._cells = cells

    def _make_key(self, value: T, hash_code: int, key_factory: Optional[KeyFactory[T]]) -> T:
        """Create the key to store for a new value.

        Raises:
            KeyContractError: If the key is not equal to the value, or has a different hash.
        """
        factory = key_factory if key_factory is not None else self._key_factory
        if factory is None:
            if canonset.WARN_MUTABLE_KEYS and _is_mutable(value):
                warnings.warn(
                    f"Storing a mutable {type(value).__name__} as a canonical value. Modifying it "
                    "will corrupt the container; provide a key factory returning an immutable copy.",
                    RuntimeWarning,
                    stacklevel=3,
                )
            return value

        key = factory(value)
        if self._hash(key) != hash_code or not self._comparer.equals(key, value):
            raise KeyContractError("Created key must be equal to value and have the same hash code.")
        return key

    def _check(self) -> None:
        """Validate the table if validation is enabled."""
        if canonset.VALIDATE:
            self.validate()

    def get(self, value: T, key_factory: Optional[KeyFactory[T]] = None) -> T:
        """Get the canonical instance of a value, adding it if necessary.

        Args:
            value: The value to look up.
            key_factory: Key factory overriding the default one, if the value must be added.

        Returns:
            The stored instance equal to `value`. If no such instance exists, the value (or the key
            created from it) is stored and returned.

        Raises:
            KeyContractError: If the created key is not equivalent to `value`.
        """
        if self._buckets is None:
            self._initialise()

        hash_code = self._hash(value)
        _, index, _, key = self._find(value, hash_code)
        if index != _NONE:
            return key  # type: ignore[return-value]

        key = self._make_key(value, hash_code, key_factory)
        cell = self._retention.assign(key)
        try:
            index = self._allocate()
        except Exception:
            self._retention.release(cell)
            raise

        assert self._buckets is not None and self._hashes is not None and self._links is not None
        bucket = hash_code % len(self._buckets)
        self._hashes[index] = hash_code
        self._cells[index] = cell
        self._links[index] = self._buckets[bucket]
        self._buckets[bucket] = index

        self._check()
        return key

    def try_get(self, value: T) -> tuple[bool, Optional[T]]:
        """Get the canonical instance of a value, if one exists.

        Args:
            value: The value to look up.

        Returns:
            Whether an instance equal to `value` is stored, and the instance if it is.
        """
        if self._buckets is None:
            return False, None

        _, index, _, key = self._find(value, self._hash(value))

        self._check()
        return index != _NONE, key

    def remove(self, value: T) -> bool:
        """Remove the canonical instance of a value.

        Args:
            value: The value to remove.

        Returns:
            Whether an instance equal to `value` was found and removed.
        """
        if self._buckets is None:
            return False

        bucket, index, prev, _ = self._find(value, self._hash(value))
        if index == _NONE:
            self._check()
            return False
        self._free_slot(index, prev, bucket)

        self._check()
        return True

    def clear(self) -> None:
        """Release all stored values and discard the table."""
        for index in self._chain():
            self._retention.release(self._cells[index])
        self._reset()

    def trim_excess(self) -> None:
        """Reclaim unresolvable slots and shrink the table to fit the remaining values."""
        if self._buckets is None:
            return
        assert self._hashes is not None

        # Hold the live keys for the duration of the rebuild
        live: list[tuple[int, Optional[T]]] = []
        stale: list[int] = []
        for index in self._chain():
            found, key = self._retention.resolve(self._cells[index])
            if found:
                live.append((index, key))
            else:
                stale.append(index)

        if not live:
            for index in stale:
                self._retention.release(self._cells[index])
            self._reset()
            return

        count = len(live)
        size = next_prime(count, self.max_size)
        indices = np.array([index for index, _ in live], dtype=np.int64)
        hashes = np.zeros(size, dtype=np.uint64)
        hashes[:count] = self._hashes[indices]
        buckets, links = _link_chains(hashes, count, size)
        cells = [self._cells[index] for index, _ in live] + [None] * (size - count)

        for index in stale:
            self._retention.release(self._cells[index])

        self._buckets = buckets
        self._hashes = hashes
        self._links = links
        self._cells = cells
        self._used = count
        self._free = _NONE

        self._check()

    def __iter__(self) -> Iterator[T]:
        """Iterate over the stored values that can still be resolved."""
        for index in self._chain():
            found, key = self._retention.resolve(self._cells[index])
            if found:
                yield key  # type: ignore[misc]

    def validate(self) -> None:
        """Check the internal consistency of the table.

        Note:
            The checks are `assert` statements, and are skipped when Python runs with
            optimisations enabled.
        """
        if self._buckets is None:
            assert self._used == 0 and self._free == _NONE, "Unallocated table has slots in use"
            return
        assert self._hashes is not None and self._links is not None

        size = len(self._buckets)
        assert len(self._hashes) == len(self._links) == len(self._cells), "Slot arrays differ"
        assert self._used <= len(self._cells), "More slots used than allocated"

        seen: set[int] = set()
        index = self._free
        while index != _NONE:
            assert index not in seen, "A free slot is listed twice"
            assert self._cells[index] is None, "A free slot must not hold a cell"
            seen.add(index)
            index = int(self._links[index])

        for bucket in range(size):
            keys: list[Any] = []
            index = int(self._buckets[bucket])
            while index != _NONE:
                assert index not in seen, "A slot is reachable twice"
                assert int(self._hashes[index]) % size == bucket, "A slot is in the wrong bucket"
                seen.add(index)
                found, key = self._retention.resolve(self._cells[index])
                if found:
                    assert not any(
                        self._comparer.equals(key, other) for other in keys
                    ), "A duplicate value was found in the table"
                    keys.append(key)
                index = int(self._links[index])

        assert seen == set(range(self._used)), "Slot count mismatch"
