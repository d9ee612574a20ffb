from __future__ import annotations

import numpy as np
from numba import njit


@njit
def alias_merge(aliases, count, a, b):
    """Merge the classes of provisional labels a and b; return the surviving id.

    Every entry equal to the larger canonical id is rewritten to the smaller
    one, so a single lookup stays sufficient afterwards.
    """
    ca = aliases[a - 1]
    cb = aliases[b - 1]
    lo = ca
    hi = cb
    if hi < lo:
        lo = cb
        hi = ca
    if lo != hi:
        for i in range(count):
            if aliases[i] == hi:
                aliases[i] = lo
    return lo


@njit
def max_alias(aliases, count):
    m = 0
    for i in range(count):
        if aliases[i] > m:
            m = aliases[i]
    return m


class AliasTable:
    """Append-only table mapping provisional labels to canonical labels.

    Entry i holds the canonical id of provisional label i+1. Canonical ids
    only ever decrease, and ties resolve to the smaller original id.
    """

    __slots__ = ("data", "count")

    def __init__(self, capacity: int = 16):
        self.data = np.zeros(max(1, int(capacity)), dtype=np.uint32)
        self.count = 0

    @classmethod
    def from_array(cls, data: np.ndarray, count: int) -> "AliasTable":
        t = cls.__new__(cls)
        t.data = data
        t.count = int(count)
        return t

    def __len__(self) -> int:
        return self.count

    def __iter__(self):
        for i in range(self.count):
            yield int(self.data[i])

    def as_array(self) -> np.ndarray:
        return self.data[:self.count].copy()

    def allocate(self) -> int:
        if self.count == self.data.size:
            grown = np.zeros(self.data.size * 2, dtype=np.uint32)
            grown[:self.count] = self.data[:self.count]
            self.data = grown
        new_id = self.count + 1
        self.data[self.count] = new_id
        self.count = new_id
        return new_id

    def resolve(self, label: int) -> int:
        if label == 0:
            return 0
        if label < 0 or label > self.count:
            raise IndexError(f"label {label} not in alias table of size {self.count}")
        return int(self.data[label - 1])

    def merge(self, a: int, b: int) -> int:
        if not (0 < a <= self.count and 0 < b <= self.count):
            raise IndexError(f"cannot merge {a} and {b} in alias table of size {self.count}")
        return int(alias_merge(self.data, self.count, a, b))

    def max_canonical(self) -> int:
        return int(max_alias(self.data, self.count))
