"""Configuration file for `pytest`."""

import gc
import hashlib
import inspect

import numpy as np
import pytest


class Token:
    """Weak-referenceable value with a controllable hash."""

    def __init__(self, name, hash_code=None):
        self.name = name
        self.hash_code = hash(name) if hash_code is None else hash_code

    def __eq__(self, other):
        return isinstance(other, Token) and self.name == other.name

    def __hash__(self):
        return self.hash_code

    def __repr__(self):
        return f"Token({self.name!r})"


class Helper:
    """Helper class for tests."""

    Token = Token

    @staticmethod
    def random(shape, seed=None):
        """Generate a deterministic array that appears random.

        Each call to this function will return a different array, but the array will always be
        the same between runs for a given call (as long as the code is not modified). Alternatively,
        a seed can be provided to generate the same array across different calls.
        """
        if seed is None:
            caller = inspect.currentframe().f_back
            location = ":".join(
                [
                    caller.f_code.co_filename.split("/")[-1],
                    caller.f_code.co_name,
                    str(caller.f_lineno),
                ]
            )
            seed = int(hashlib.sha256(location.encode()).hexdigest(), 16) % int(1e10)
        size = np.prod(shape)
        array = np.cos(np.arange(size) + seed).reshape(shape)
        return array

    @staticmethod
    def frozen(array):
        """Return a read-only copy of an array."""
        copy = np.array(array)
        copy.flags.writeable = False
        return copy

    @staticmethod
    def collect():
        """Force a garbage collection."""
        for _ in range(3):
            gc.collect()


@pytest.fixture
def helper():
    """Fixture for the helper class."""
    return Helper()
