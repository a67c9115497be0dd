# pid_ratelimit/core/history.py
import numpy as np
from typing import Iterator, Optional


class BoundedHistory:
    """Fixed-capacity FIFO of scalars backed by a numpy ring buffer.

    Eviction happens right after each push: the oldest values are dropped
    until the length fits the capacity again. A capacity of zero (or less)
    leaves the history empty after every push.
    """

    def __init__(self, capacity: int):
        self.capacity = capacity
        self._buffer = np.zeros(max(capacity, 1), dtype=np.float64)
        self._start = 0
        self._count = 0

    def set_capacity(self, capacity: int):
        # retained values are only trimmed on the next push
        if capacity > len(self._buffer):
            self._buffer = self._reallocate(capacity)
            self._start = 0
        self.capacity = capacity

    def _reallocate(self, size: int) -> np.ndarray:
        buffer = np.zeros(size, dtype=np.float64)
        buffer[:self._count] = self.values()
        return buffer

    def push(self, value: float):
        size = len(self._buffer)
        if self._count == size:
            self._buffer[self._start] = value
            self._start = (self._start + 1) % size
        else:
            self._buffer[(self._start + self._count) % size] = value
            self._count += 1

        while self._count > max(self.capacity, 0):
            self._start = (self._start + 1) % size
            self._count -= 1

    def clear(self):
        self._start = 0
        self._count = 0

    def values(self) -> np.ndarray:
        idx = (self._start + np.arange(self._count)) % len(self._buffer)
        return self._buffer[idx].copy()

    def last(self) -> Optional[float]:
        if self._count == 0:
            return None
        return float(self._buffer[(self._start + self._count - 1) % len(self._buffer)])

    def sum(self) -> float:
        # left fold in insertion order, so results match a plain running total
        total = 0.0
        for value in self:
            total += value
        return total

    def count(self, value: float) -> int:
        return int(np.count_nonzero(self.values() == value))

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[float]:
        size = len(self._buffer)
        for i in range(self._count):
            yield float(self._buffer[(self._start + i) % size])

    def __repr__(self) -> str:
        return f"BoundedHistory(capacity={self.capacity}, values={self.values().tolist()})"
