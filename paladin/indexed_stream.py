"""An asynchronous stream whose items carry their original position."""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Iterable
from typing import Any, Generic, TypeVar

from paladin.directive import Directive

__all__ = ["IndexedStream", "from_iterable", "try_from_iterable"]

T = TypeVar("T")


class IndexedStream(Directive, Generic[T]):
    """A stream of ``(index, item)`` pairs suited to parallel processing.

    Items may arrive out of order; the index records where each one belongs.
    Errors in the underlying stream are raised while iterating. The stream is
    consumed once.
    """

    def __init__(self, inner: AsyncIterable[tuple[int, T]]) -> None:
        self._inner = inner

    def __aiter__(self) -> AsyncIterator[tuple[int, T]]:
        return aiter(self._inner)

    async def into_values_sorted(self) -> list[T]:
        """Drive the stream to completion and return its values in index order."""
        pairs = [pair async for pair in self]
        pairs.sort(key=lambda pair: pair[0])
        return [value for _, value in pairs]

    async def run(self, runtime: Any) -> "IndexedStream[T]":
        return self


async def _enumerate(iterable: Iterable[T]) -> AsyncIterator[tuple[int, T]]:
    for idx, item in enumerate(iterable):
        yield idx, item


async def _enumerate_results(iterable: Iterable[Any]) -> AsyncIterator[tuple[int, Any]]:
    for idx, item in enumerate(iterable):
        if isinstance(item, BaseException):
            raise item
        yield idx, item


def from_iterable(iterable: Iterable[T]) -> IndexedStream[T]:
    """Make an indexed stream from ``iterable``, numbering items from 0."""
    return IndexedStream(_enumerate(iterable))


def try_from_iterable(iterable: Iterable[Any]) -> IndexedStream[Any]:
    """Make an indexed stream from values, where an exception stands for an error.

    Iteration raises the first exception instance met in ``iterable``.
    """
    return IndexedStream(_enumerate_results(iterable))