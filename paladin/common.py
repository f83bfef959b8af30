"""Small shared helpers."""

from __future__ import annotations

import random
import string

__all__ = ["get_random_routing_key"]

_ALPHANUMERIC = string.ascii_letters + string.digits
_ROUTING_KEY_LENGTH = 5


def get_random_routing_key() -> str:
    """Return a random five-character alphanumeric routing key."""
    return "".join(random.choices(_ALPHANUMERIC, k=_ROUTING_KEY_LENGTH))