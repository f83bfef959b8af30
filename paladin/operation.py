"""Operations: the units of computation that workers execute.

An :class:`Operation` maps an input to an output, much like a function. A
:class:`Monoid` is a binary operation with an identity element whose
combination is associative, which makes it suitable for folding.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, Tuple, TypeVar

__all__ = ["AbortSignal", "is_aborted", "Operation", "Monoid"]

I = TypeVar("I")
O = TypeVar("O")
E = TypeVar("E")

AbortSignal = Optional[threading.Event]
"""A shared flag that asks a running operation to stop early, or None."""


def is_aborted(abort: AbortSignal) -> bool:
    """Return True if ``abort`` is present and has been set."""
    return abort is not None and abort.is_set()


class Operation(ABC, Generic[I, O]):
    """A computation that a worker can perform on an input."""

    @abstractmethod
    def execute(self, input: I, abort: AbortSignal = None) -> O:
        """Run the operation on ``input``.

        Failures are reported by raising an
        :class:`~paladin.errors.OperationError`. Long-running implementations
        should check ``abort`` with :func:`is_aborted` now and then.
        """


class Monoid(Operation[Tuple[E, E], E]):
    """An associative binary operation with an identity element.

    Every monoid is also an operation whose input is a pair of elements and
    whose output is their combination.
    """

    @abstractmethod
    def empty(self) -> E:
        """Return the identity element, used when folding an empty collection."""

    @abstractmethod
    def combine(self, a: E, b: E, abort: AbortSignal = None) -> E:
        """Combine two elements into one."""

    def execute(self, input: Tuple[E, E], abort: AbortSignal = None) -> E:
        """Combine the two elements of ``input``."""
        a, b = input
        return self.combine(a, b, abort)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def _describe(value: Any) -> str:
    return repr(value)