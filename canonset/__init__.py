"""
*********************************************************
canonset: Single canonical instances of equivalent values
*********************************************************

The `canonset` package provides containers that hand out a single canonical instance for every
group of equal values, so that repeated equal values (strings, tuples, arrays, ...) produced while
parsing or building a large structure can share one object.

Two containers are provided: `SingleValueSet`, which keeps its canonical values alive until they
are removed, and `WeakSingleValueSet`, which forgets a canonical value once nothing else
references it.


Installation
------------

        pip install .

from the root of a checkout of the repository.

"""  # noqa: D205, D212, D415

from __future__ import annotations

import sys

__version__ = "0.1.0"

INITIAL_SIZE = 3  # minimum size requested for a new table
MAX_TABLE_SIZE = sys.maxsize  # upper bound on bucket and slot array sizes

VALIDATE = 0
WARN_MUTABLE_KEYS = 1

from canonset.comparer import DefaultComparer, IdentityComparer, SequenceComparer  # noqa: E402
from canonset.containers import SingleValueSet, WeakSingleValueSet  # noqa: E402
from canonset.index import HashIndex, KeyContractError  # noqa: E402
from canonset.primes import is_prime, next_prime  # noqa: E402
from canonset.retention import Retention, StrongRetention, WeakRetention  # noqa: E402

__all__ = [
    "DefaultComparer",
    "HashIndex",
    "IdentityComparer",
    "KeyContractError",
    "Retention",
    "SequenceComparer",
    "SingleValueSet",
    "StrongRetention",
    "WeakRetention",
    "WeakSingleValueSet",
    "is_prime",
    "next_prime",
]
