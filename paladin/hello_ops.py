"""Sample operations: turning characters into strings and joining them."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from paladin.errors import FatalError, FatalStrategy
from paladin.operation import AbortSignal, Monoid, Operation, is_aborted

__all__ = ["CharToString", "StringConcat"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CharToString(Operation[str, str]):
    """Turn a character into a string after a simulated long job.

    The job runs ``iterations`` steps of ``step`` seconds each and checks the
    abort signal after every step.
    """

    step: float = 0.1
    iterations: int = 9

    def execute(self, input: str, abort: AbortSignal = None) -> str:
        for i in range(1, self.iterations + 1):
            if self.step > 0:
                time.sleep(self.step)
            if is_aborted(abort):
                raise FatalError(
                    f"aborted per request at CharToString iteration {i} "
                    f"for input {input!r}",
                    FatalStrategy.TERMINATE,
                )
        logger.info("CharToString operation finished for input: %r", input)
        return str(input)


class StringConcat(Monoid[str]):
    """Concatenate strings; the empty string is the identity."""

    def empty(self) -> str:
        return ""

    def combine(self, a: str, b: str, abort: AbortSignal = None) -> str:
        return a + b