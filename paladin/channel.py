"""Channels for inter-process communication.

Unlike an ordinary in-process channel, these channels support message
acknowledgement and resource release. The sending and receiving ends are
acquired separately, since they usually live in different processes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from enum import Enum
from typing import Any, Generic, TypeVar

__all__ = ["ChannelType", "Publisher", "Channel", "ChannelFactory", "LeaseGuard"]

P = TypeVar("P")


class ChannelType(Enum):
    """How messages on a channel are delivered to consumers."""

    EXACTLY_ONCE = "exactly_once"
    BROADCAST = "broadcast"


class Publisher(ABC):
    """The sending end of a channel."""

    @abstractmethod
    async def publish(self, payload: Any) -> None:
        """Send ``payload`` down the channel."""

    @abstractmethod
    async def close(self) -> None:
        """Close the sending end."""


class Channel(ABC):
    """A distributed channel whose ends are acquired separately."""

    @abstractmethod
    async def close(self) -> None:
        """Close the channel and its underlying resources."""

    @abstractmethod
    async def sender(self) -> Publisher:
        """Acquire the sending end of the channel."""

    @abstractmethod
    async def receiver(self) -> AsyncIterator[Any]:
        """Acquire the receiving end: an async iterator of (message, acker) pairs."""

    @abstractmethod
    def release(self) -> None:
        """Mark the channel for release."""


class ChannelFactory(ABC):
    """Issues new channels and retrieves existing ones by identifier."""

    @abstractmethod
    async def get(self, identifier: str, channel_type: ChannelType) -> Channel:
        """Retrieve the channel issued under ``identifier``."""

    @abstractmethod
    async def issue(self, channel_type: ChannelType) -> tuple[str, Channel]:
        """Issue a new channel, returning its identifier and the channel."""


class LeaseGuard(Generic[P]):
    """Holds one end of a channel and releases the channel when done.

    Attribute access is forwarded to the pipe, and when the pipe is an async
    iterable the guard can be iterated directly. The channel is released at
    most once: on :meth:`release`, on leaving a ``with`` block, or when the
    guard is garbage collected.
    """

    def __init__(self, channel: Channel, pipe: P) -> None:
        self._channel: Channel | None = channel
        self._pipe = pipe
        self._iterator: AsyncIterator[Any] | None = None

    @property
    def pipe(self) -> P:
        """The guarded end of the channel."""
        return self._pipe

    def __aiter__(self) -> "LeaseGuard[P]":
        return self

    async def __anext__(self) -> Any:
        if self._iterator is None:
            self._iterator = aiter(self._pipe)  # type: ignore[arg-type]
        return await self._iterator.__anext__()

    def __getattr__(self, name: str) -> Any:
        if name in ("_channel", "_pipe", "_iterator"):
            raise AttributeError(name)
        return getattr(self._pipe, name)

    def release(self) -> None:
        """Release the channel if it has not been released already."""
        channel, self._channel = self._channel, None
        if channel is not None:
            channel.release()

    def __enter__(self) -> "LeaseGuard[P]":
        return self

    def __exit__(self, *args: object) -> None:
        self.release()

    def __del__(self) -> None:
        try:
            self.release()
        except Exception:
            pass