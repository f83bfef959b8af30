"""Message acknowledgement handles."""

from __future__ import annotations

from abc import ABC, abstractmethod

__all__ = ["Acker", "ComposedAcker", "NoopAcker"]


class Acker(ABC):
    """Something that can positively or negatively acknowledge a message."""

    @abstractmethod
    async def ack(self) -> None:
        """Acknowledge the message."""

    @abstractmethod
    async def nack(self) -> None:
        """Negatively acknowledge the message."""


class ComposedAcker(Acker):
    """Acknowledges through two ackers in turn.

    The second acker is only reached when the first one succeeds; an
    exception from the first propagates and the second is skipped.
    """

    def __init__(self, fst: Acker, snd: Acker) -> None:
        self.fst = fst
        self.snd = snd

    async def ack(self) -> None:
        await self.fst.ack()
        await self.snd.ack()

    async def nack(self) -> None:
        await self.fst.nack()
        await self.snd.nack()


class NoopAcker(Acker):
    """An acker that does nothing; handy for in-memory channels and tests."""

    async def ack(self) -> None:
        return None

    async def nack(self) -> None:
        return None