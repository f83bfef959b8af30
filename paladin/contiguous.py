"""Queueing and pairing of contiguous values."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from bisect import bisect_left, insort
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

__all__ = ["Contiguous", "Side", "Position", "ContiguousQueue"]


class Contiguous(ABC):
    """A value that knows whether it sits directly next to another value."""

    @abstractmethod
    def is_contiguous(self, other: Any) -> bool:
        """Return True if this value is adjacent to ``other``."""

    @abstractmethod
    def key(self) -> Any:
        """Return the ordering key used to index this value."""


T = TypeVar("T", bound=Contiguous)


class Side(Enum):
    """Where a found value lies relative to the probe value."""

    LHS = "lhs"
    RHS = "rhs"


@dataclass(frozen=True)
class Position(Generic[T]):
    """A value found next to another, and the side it lies on."""

    side: Side
    value: T


class ContiguousQueue(Generic[T]):
    """Holds values by key and pairs each new value with an adjacent one.

    Safe to share between threads.
    """

    def __init__(self, values: Iterable[T] = ()) -> None:
        self._lock = threading.RLock()
        self._values: dict[Any, T] = {}
        self._keys: list[Any] = []
        for value in values:
            self.queue(value)

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)

    def _take_at(self, index: int) -> T:
        key = self._keys.pop(index)
        return self._values.pop(key)

    def find_contiguous(self, next_value: T) -> Position[T] | None:
        """Remove and return a queued value adjacent to ``next_value``.

        The nearest value at or above the key is tried first, then the
        nearest value below it. Returns None when neither is adjacent.
        """
        key = next_value.key()
        with self._lock:
            index = bisect_left(self._keys, key)
            if index < len(self._keys):
                candidate = self._values[self._keys[index]]
                if next_value.is_contiguous(candidate):
                    return Position(Side.RHS, self._take_at(index))
            if index > 0:
                candidate = self._values[self._keys[index - 1]]
                if next_value.is_contiguous(candidate):
                    return Position(Side.LHS, self._take_at(index - 1))
        return None

    def queue(self, value: T) -> None:
        """Store ``value`` under its key, replacing any value with that key."""
        key = value.key()
        with self._lock:
            if key not in self._values:
                insort(self._keys, key)
            self._values[key] = value

    def dequeue(self, key: Any) -> T | None:
        """Remove and return the value stored under ``key``, if any."""
        with self._lock:
            if key not in self._values:
                return None
            self._keys.remove(key)
            return self._values.pop(key)

    def acquire_contiguous_pair_or_queue(self, next_value: T) -> tuple[T, T] | None:
        """Pair ``next_value`` with an adjacent value, or queue it.

        The pair is returned in order (left, right). When no adjacent value
        is queued, ``next_value`` is stored and None is returned.
        """
        with self._lock:
            position = self.find_contiguous(next_value)
            if position is None:
                self.queue(next_value)
                return None
        if position.side is Side.LHS:
            return position.value, next_value
        return next_value, position.value