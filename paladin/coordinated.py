"""State shared between a publisher and a stream that are not linked.

Closing a sender usually tells the receiver that the channel is closed,
while still letting it drain what is left. When the two ends are separate
channels they share no state, so this module binds them to a
:class:`ChannelState` that tracks sender closure and unacknowledged sends.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

from paladin.acker import Acker
from paladin.channel import Publisher

__all__ = [
    "ChannelState",
    "CoordinatedPublisherError",
    "PublisherClosedError",
    "CoordinatedPublisher",
    "CoordinatedAcker",
    "CoordinatedStream",
    "coordinated_channel",
]


class ChannelState:
    """Whether the sender is closed and how many sends await acknowledgement."""

    def __init__(self) -> None:
        self.closed = False
        self.num_pending_sends = 0
        self._waiters: set[asyncio.Future[None]] = set()

    def close(self) -> None:
        """Mark the channel as closed."""
        if self.closed:
            return
        self.closed = True
        self._notify()

    def _add_send(self) -> None:
        self.num_pending_sends += 1

    def _complete_send(self) -> None:
        self.num_pending_sends -= 1
        if self.num_pending_sends == 0:
            self._notify()

    def _notify(self) -> None:
        for waiter in list(self._waiters):
            if not waiter.done():
                waiter.set_result(None)

    async def _wait_for_change(self, other: asyncio.Future[Any] | None = None) -> None:
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.add(waiter)
        try:
            pending: set[asyncio.Future[Any]] = {waiter}
            if other is not None:
                pending.add(other)
            await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
        finally:
            self._waiters.discard(waiter)
            waiter.cancel()


class CoordinatedPublisherError(Exception):
    """An error raised by a coordinated publisher."""


class PublisherClosedError(CoordinatedPublisherError):
    """Raised when publishing on a closed coordinated publisher."""

    def __init__(self) -> None:
        super().__init__("Publisher is closed")


class CoordinatedPublisher(Publisher):
    """Wraps a publisher, counting pending sends and closing the shared state."""

    def __init__(self, inner: Publisher, state: ChannelState) -> None:
        self._inner = inner
        self._state = state

    async def publish(self, payload: Any) -> None:
        """Publish ``payload`` through the inner publisher.

        Raises PublisherClosedError once closed; a failure of the inner
        publisher is raised as CoordinatedPublisherError.
        """
        if self._state.closed:
            raise PublisherClosedError()
        self._state._add_send()
        try:
            await self._inner.publish(payload)
        except Exception as err:
            raise CoordinatedPublisherError(f"Inner error: {err}") from err

    async def close(self) -> None:
        """Close the inner publisher and mark the channel closed."""
        await self._inner.close()
        self._state.close()

    def __del__(self) -> None:
        state = getattr(self, "_state", None)
        if state is not None:
            state.close()


class CoordinatedAcker(Acker):
    """Acknowledges one received message, counting it as handled once."""

    def __init__(self, state: ChannelState) -> None:
        self._state = state
        self._did_ack = False

    async def ack(self) -> None:
        """Mark the message handled; repeated calls have no further effect."""
        if self._did_ack:
            return
        self._did_ack = True
        self._state._complete_send()

    async def nack(self) -> None:
        """Redelivery is not handled, so this acknowledges the message."""
        await self.ack()


async def _pull(iterator: AsyncIterator[Any]) -> tuple[bool, Any]:
    try:
        return False, await iterator.__anext__()
    except StopAsyncIteration:
        return True, None


class CoordinatedStream:
    """Wraps a stream so that it ends when the shared channel is drained.

    Each item is yielded as ``(item, CoordinatedAcker)``. Iteration stops once
    the sender is closed and every send has been acknowledged, even if the
    inner stream would never end by itself.
    """

    def __init__(self, inner: AsyncIterable[Any], state: ChannelState) -> None:
        self._iterator = aiter(inner)
        self._state = state
        self._next: asyncio.Future[tuple[bool, Any]] | None = None
        self._exhausted = False

    def __aiter__(self) -> "CoordinatedStream":
        return self

    async def __anext__(self) -> tuple[Any, CoordinatedAcker]:
        state = self._state
        while True:
            if self._exhausted:
                if state.num_pending_sends == 0:
                    raise StopAsyncIteration
                await state._wait_for_change()
                continue

            if self._next is None:
                self._next = asyncio.ensure_future(_pull(self._iterator))
                await asyncio.sleep(0)

            if self._next.done():
                task, self._next = self._next, None
                finished, item = task.result()
                if finished:
                    self._exhausted = True
                    continue
                return item, CoordinatedAcker(state)

            if state.closed and state.num_pending_sends == 0:
                self._next.cancel()
                self._next = None
                raise StopAsyncIteration

            await state._wait_for_change(self._next)


def coordinated_channel(
    sender: Publisher, receiver: AsyncIterable[Any]
) -> tuple[CoordinatedPublisher, CoordinatedStream]:
    """Bind ``sender`` and ``receiver`` to one shared :class:`ChannelState`."""
    state = ChannelState()
    return CoordinatedPublisher(sender, state), CoordinatedStream(receiver, state)