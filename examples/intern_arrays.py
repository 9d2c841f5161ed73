"""Example of sharing a single instance of equal `numpy` arrays using `canonset`."""

import numpy as np

from canonset import SequenceComparer, SingleValueSet


def frozen_copy(array):
    """Return a read-only copy of an array, unless it is already read-only."""
    if not array.flags.writeable:
        return array
    copy = np.array(array)
    copy.flags.writeable = False
    return copy


first = np.array([5.0, 10.0, 15.0, 20.0])
second = np.array([5.0, 10.0, 15.0, 20.0])
print(f"first is second: {first is second}")

# Compare the contents of the arrays rather than their identity, and store read-only copies so
# that the canonical arrays cannot be modified through the working buffers
arrays = SingleValueSet(SequenceComparer(), key_factory=frozen_copy)

first_single = arrays[first]
assert first_single is not first, "The mutable array should have been copied"

second_single = arrays[second]
print(f"first_single is second_single: {first_single is second_single}")
print(f"Distinct arrays stored: {len(arrays)}")
