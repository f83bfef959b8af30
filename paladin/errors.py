"""Operation errors and the strategies for recovering from them.

Two kinds of error are recognised. A transient error is expected to go away
when the operation is retried, for example a network timeout. A fatal error
is not, for example a malformed request. A transient error turns into a fatal
one once its retry strategy is exhausted.
"""

from __future__ import annotations

import asyncio
import random
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TypeVar

__all__ = [
    "FatalStrategy",
    "RetryStrategy",
    "ImmediateRetry",
    "AfterRetry",
    "ExponentialRetry",
    "default_retry_strategy",
    "OperationError",
    "TransientError",
    "FatalError",
]

O = TypeVar("O")
E = TypeVar("E", bound=BaseException)

Thunk = Callable[[], Awaitable[O]]
Tracer = Callable[[E], object]

DEFAULT_MAX_RETRIES = 3

# Parameters of the exponential backoff schedule.
BACKOFF_MULTIPLIER = 1.5
BACKOFF_RANDOMIZATION_FACTOR = 0.5
BACKOFF_MAX_INTERVAL = 60.0


class FatalStrategy(Enum):
    """How to respond to an error that retrying will not fix.

    ``TERMINATE`` ends the whole distributed program and is the default.
    ``IGNORE`` leaves the error alone; the program then waits for the
    result to arrive by some other means.
    """

    TERMINATE = "terminate"
    IGNORE = "ignore"


async def _run_with_schedule(
    f: Callable[[], Awaitable[O]],
    schedule: Iterator[float],
    tracer: Optional[Callable[[BaseException], object]],
    catch: type[BaseException] | tuple[type[BaseException], ...],
) -> O:
    while True:
        try:
            return await f()
        except catch as err:
            delay = next(schedule, None)
            if delay is None:
                raise
            if tracer is not None:
                tracer(err)
            if delay > 0:
                await asyncio.sleep(delay)


class RetryStrategy(ABC):
    """A policy for retrying an operation that failed with a transient error."""

    @abstractmethod
    def _schedule(self) -> Iterator[float]:
        """Yield the delay, in seconds, before each retry; stop when exhausted."""

    async def _retry(
        self,
        f: Callable[[], Awaitable[O]],
        tracer: Optional[Callable[[BaseException], object]],
        catch: type[BaseException] | tuple[type[BaseException], ...] = Exception,
    ) -> O:
        return await _run_with_schedule(f, self._schedule(), tracer, catch)

    async def retry(self, f: Callable[[], Awaitable[O]]) -> O:
        """Await ``f()`` until it succeeds or the strategy is exhausted.

        The last exception is raised once no retries are left.
        """
        return await self._retry(f, None)

    async def retry_trace(
        self, f: Callable[[], Awaitable[O]], tracer: Callable[[BaseException], object]
    ) -> O:
        """Like :meth:`retry`, passing each error that leads to a retry to ``tracer``."""
        return await self._retry(f, tracer)


def _check_max_retries(max_retries: int) -> None:
    if max_retries < 1:
        raise ValueError(f"max_retries must be at least 1, got {max_retries}")


def _check_duration(name: str, value: float) -> None:
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")


@dataclass(frozen=True)
class ImmediateRetry(RetryStrategy):
    """Retry straight away, up to ``max_retries`` times."""

    max_retries: int = DEFAULT_MAX_RETRIES

    def __post_init__(self) -> None:
        _check_max_retries(self.max_retries)

    def _schedule(self) -> Iterator[float]:
        return iter([0.0] * self.max_retries)


@dataclass(frozen=True)
class AfterRetry(RetryStrategy):
    """Retry after waiting ``duration`` seconds, up to ``max_retries`` times."""

    max_retries: int
    duration: float

    def __post_init__(self) -> None:
        _check_max_retries(self.max_retries)
        _check_duration("duration", self.duration)

    def _schedule(self) -> Iterator[float]:
        return iter([float(self.duration)] * self.max_retries)


@dataclass(frozen=True)
class ExponentialRetry(RetryStrategy):
    """Retry with randomised exponential backoff.

    The first wait is around ``min_duration`` seconds; retrying stops once
    more than ``max_duration`` seconds have passed.
    """

    min_duration: float
    max_duration: float

    def __post_init__(self) -> None:
        _check_duration("min_duration", self.min_duration)
        _check_duration("max_duration", self.max_duration)

    def intervals(self) -> Iterator[float]:
        """Yield randomised backoff intervals, growing without end."""
        interval = float(self.min_duration)
        while True:
            delta = BACKOFF_RANDOMIZATION_FACTOR * interval
            yield random.uniform(interval - delta, interval + delta)
            interval = min(interval * BACKOFF_MULTIPLIER, BACKOFF_MAX_INTERVAL)

    def _schedule(self) -> Iterator[float]:
        start = time.monotonic()
        return self._bounded(start)

    def _bounded(self, start: float) -> Iterator[float]:
        for interval in self.intervals():
            if time.monotonic() - start > self.max_duration:
                return
            yield interval


def default_retry_strategy() -> RetryStrategy:
    """Return the default strategy: three immediate retries."""
    return ImmediateRetry(DEFAULT_MAX_RETRIES)


def _as_exception(err: BaseException | str) -> BaseException:
    return Exception(err) if isinstance(err, str) else err


class OperationError(Exception):
    """Base class of errors raised by operations.

    ``err`` holds the underlying error.
    """

    _prefix = "Operation error"

    def __init__(self, err: BaseException | str) -> None:
        self.err: BaseException = _as_exception(err)
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"{self._prefix}: {self.err}"

    async def _retry(
        self,
        f: Callable[[], Awaitable[O]],
        tracer: Optional[Callable[["OperationError"], object]],
    ) -> O:
        raise self

    async def retry(self, f: Callable[[], Awaitable[O]]) -> O:
        """Recover by retrying ``f`` according to this error's strategy.

        A fatal error is raised again unchanged. A transient error retries
        ``f``; when its strategy is exhausted a :class:`FatalError` wrapping
        the last underlying error is raised.
        """
        return await self._retry(f, None)

    async def retry_trace(
        self,
        f: Callable[[], Awaitable[O]],
        tracer: Callable[["OperationError"], object],
    ) -> O:
        """Like :meth:`retry`, passing each error that leads to a retry to ``tracer``."""
        return await self._retry(f, tracer)

    def into_fatal(self) -> "FatalError":
        """Return this error as a fatal error."""
        raise NotImplementedError

    def fatal_strategy(self) -> FatalStrategy:
        """Return the strategy to use once this error is fatal."""
        raise NotImplementedError


class TransientError(OperationError):
    """An error expected to be resolved by retrying the operation."""

    _prefix = "Transient operation error"

    def __init__(
        self,
        err: BaseException | str,
        retry_strategy: RetryStrategy | None = None,
        fatal_strategy: FatalStrategy = FatalStrategy.TERMINATE,
    ) -> None:
        self.retry_strategy: RetryStrategy = (
            retry_strategy if retry_strategy is not None else default_retry_strategy()
        )
        self._fatal_strategy = fatal_strategy
        super().__init__(err)

    async def _retry(
        self,
        f: Callable[[], Awaitable[O]],
        tracer: Optional[Callable[[OperationError], object]],
    ) -> O:
        try:
            return await self.retry_strategy._retry(f, tracer, OperationError)
        except OperationError as last:
            raise FatalError(last.err, self._fatal_strategy) from last

    def into_fatal(self) -> "FatalError":
        return FatalError(self.err, self._fatal_strategy)

    def fatal_strategy(self) -> FatalStrategy:
        return self._fatal_strategy


class FatalError(OperationError):
    """An error not expected to be resolved by retrying the operation."""

    _prefix = "Fatal operation error"

    def __init__(
        self,
        err: BaseException | str,
        strategy: FatalStrategy = FatalStrategy.TERMINATE,
    ) -> None:
        self.strategy = strategy
        super().__init__(err)

    def into_fatal(self) -> "FatalError":
        return self

    def fatal_strategy(self) -> FatalStrategy:
        return self.strategy