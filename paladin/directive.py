"""Directives: the nodes of an execution tree.

A directive holds higher-order evaluation rules. It says how operations are
orchestrated and how their results are combined. Directives chain together:
:meth:`Directive.map` and :meth:`Directive.fold` wrap a directive in a new
one, and nothing is evaluated until :meth:`Directive.run` is awaited.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from paladin.operation import Monoid, Operation

__all__ = ["Directive", "Functor", "Foldable", "Map", "Fold", "Literal"]

T = TypeVar("T")


class Directive(ABC):
    """A lazily evaluated node of an execution tree."""

    def map(self, op: Operation) -> "Map":
        """Map the output of this directive over ``op``.

        The directive must evaluate to a :class:`Functor`.
        """
        return Map(op, self)

    def fold(self, m: Monoid) -> "Fold":
        """Fold the output of this directive with ``m`` down to one value.

        The directive must evaluate to a :class:`Foldable`.
        """
        return Fold(m, self)

    @abstractmethod
    async def run(self, runtime: Any) -> Any:
        """Evaluate this directive on ``runtime`` and return its output."""


class Functor(ABC):
    """A structure that can be mapped over, keeping its shape."""

    @abstractmethod
    async def f_map(self, op: Operation, runtime: Any) -> Any:
        """Apply ``op`` to every value held, returning a structure of the same kind."""


class Foldable(ABC):
    """A structure whose values can be combined with a monoid."""

    @abstractmethod
    async def f_fold(self, m: Monoid, runtime: Any) -> Any:
        """Combine every value held with ``m``, keeping the order of combination."""


class Map(Directive):
    """A pending mapping of an operation over a directive's functor output."""

    def __init__(self, op: Operation, input: Directive) -> None:
        self.op = op
        self.input = input

    async def run(self, runtime: Any) -> Any:
        """Run the input directive, then map the operation over its output.

        Raises TypeError when the input does not evaluate to a Functor.
        """
        functor = await self.input.run(runtime)
        if not isinstance(functor, Functor):
            raise TypeError(
                f"cannot map over {type(functor).__name__}: it is not a Functor"
            )
        return await functor.f_map(self.op, runtime)


class Fold(Directive):
    """A pending fold of a monoid over a directive's foldable output."""

    def __init__(self, m: Monoid, input: Directive) -> None:
        self.m = m
        self.input = input

    async def run(self, runtime: Any) -> Any:
        """Run the input directive, then fold its output with the monoid.

        Raises TypeError when the input does not evaluate to a Foldable.
        """
        foldable = await self.input.run(runtime)
        if not isinstance(foldable, Foldable):
            raise TypeError(
                f"cannot fold over {type(foldable).__name__}: it is not a Foldable"
            )
        return await foldable.f_fold(self.m, runtime)


@dataclass(frozen=True)
class Literal(Directive, Generic[T]):
    """A plain value lifted into a directive chain; running it returns itself."""

    value: T

    async def run(self, runtime: Any) -> "Literal[T]":
        return self