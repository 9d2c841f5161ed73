import math

import numpy as np
import pytest

from canonset.comparer import DefaultComparer, IdentityComparer, SequenceComparer
from canonset.retention import StrongRetention, WeakRetention


def test_strong_retention(helper):
    retention = StrongRetention()
    token = helper.Token("a")

    cell = retention.assign(token)
    assert retention.count == 1
    found, key = retention.resolve(cell)
    assert found
    assert key is token

    retention.release(cell)
    assert retention.count == 0


def test_weak_retention(helper):
    retention = WeakRetention()
    token = helper.Token("a")

    cell = retention.assign(token)
    found, key = retention.resolve(cell)
    assert found
    assert key is token
    del key

    del token
    helper.collect()
    found, key = retention.resolve(cell)
    assert not found
    assert key is None

    retention.release(cell)


def test_weak_retention_unsupported():
    retention = WeakRetention()
    with pytest.raises(TypeError):
        retention.assign(("a", 1))


def test_default_comparer():
    comparer = DefaultComparer()
    assert comparer.equals("ab", "a" + "b")
    assert not comparer.equals("ab", "ba")
    assert comparer.hash((1, 2)) == hash((1, 2))
    assert repr(comparer) == "DefaultComparer()"


def test_identity_comparer():
    comparer = IdentityComparer()
    a = [1, 2]
    b = [1, 2]
    assert comparer.equals(a, a)
    assert not comparer.equals(a, b)
    assert comparer.hash(a) == id(a)


def test_sequence_comparer(helper):
    comparer = SequenceComparer()

    assert comparer.equals([1, 2, 3], (1, 2, 3))
    assert comparer.hash([1, 2, 3]) == comparer.hash((1, 2, 3))
    assert not comparer.equals([1, 2, 3], [1, 2])
    assert not comparer.equals([1, 2, 3], None)
    assert comparer.equals(None, None)
    assert comparer.hash(None) == 0

    a = helper.random((6,), seed=1)
    b = helper.random((6,), seed=1)
    c = helper.random((6,), seed=2)
    assert a is not b
    assert comparer.equals(a, b)
    assert comparer.hash(a) == comparer.hash(b)
    assert not comparer.equals(a, c)
    assert comparer.equals(a, list(a))
    assert comparer.hash(a) == comparer.hash(a.tolist())


def test_sequence_comparer_nan():
    comparer = SequenceComparer()
    a = np.array([1.0, math.nan, 3.0])
    b = np.array([1.0, math.nan, 3.0])
    assert comparer.equals(a, b)
    assert comparer.hash(a) == comparer.hash(b)
    assert comparer.hash(a) == comparer.hash(a.copy())
    assert comparer.equals([1.0, float("nan")], (1.0, float("nan")))
    assert comparer.hash([1.0, float("nan")]) == comparer.hash((1.0, float("nan")))
    assert comparer.equals(a, a.tolist())
    assert not comparer.equals(a, np.array([1.0, 2.0, 3.0]))
    assert not comparer.equals(np.array(["a", "b"]), np.array(["a", "c"]))
    assert comparer.equals(np.array(["a", "b"]), ["a", "b"])
