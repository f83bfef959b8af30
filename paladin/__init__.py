"""Building blocks for declarative distributed computation: operations,
monoids, retry strategies, directives, indexed streams, channel interfaces,
coordinated channels, a contiguous queue and runtime configuration."""

__version__ = "0.1.0"

__all__ = [
    "acker",
    "channel",
    "common",
    "config",
    "contiguous",
    "coordinated",
    "directive",
    "errors",
    "hello_ops",
    "indexed_stream",
    "operation",
]