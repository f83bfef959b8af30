"""Shared runtime configuration, settable from the command line or environment."""

from __future__ import annotations

import argparse
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Callable, TypeVar

__all__ = [
    "Serializer",
    "RuntimeKind",
    "Config",
    "add_config_arguments",
    "config_from_namespace",
    "parse_config",
]

HELP_HEADING = "Paladin options"

E = TypeVar("E", bound=Enum)


class Serializer(Enum):
    """Available serialization formats."""

    POSTCARD = "postcard"
    CBOR = "cbor"


class RuntimeKind(Enum):
    """Available runtime environments."""

    AMQP = "amqp"
    IN_MEMORY = "in-memory"


@dataclass(frozen=True)
class Config:
    """Main runtime configuration."""

    serializer: Serializer = Serializer.POSTCARD
    runtime: RuntimeKind = RuntimeKind.AMQP
    num_workers: int | None = None
    amqp_uri: str | None = None
    task_bus_routing_key: str | None = None


_ENV_VARS = {
    "serializer": "PALADIN_SERIALIZER",
    "runtime": "PALADIN_RUNTIME",
    "num_workers": "PALADIN_NUM_WORKERS",
    "amqp_uri": "PALADIN_AMQP_URI",
    "task_bus_routing_key": "PALADIN_TASK_BUS_ROUTING_KEY",
}

_DEFAULTS: dict[str, str | None] = {
    "serializer": Serializer.POSTCARD.value,
    "runtime": RuntimeKind.AMQP.value,
    "num_workers": None,
    "amqp_uri": None,
    "task_bus_routing_key": None,
}


def _enum_type(enum_cls: type[E]) -> Callable[[str], E]:
    def convert(text: str) -> E:
        try:
            return enum_cls(text)
        except ValueError:
            choices = ", ".join(member.value for member in enum_cls)
            raise argparse.ArgumentTypeError(
                f"invalid value {text!r} (possible values: {choices})"
            ) from None

    convert.__name__ = enum_cls.__name__.lower()
    return convert


def _non_negative_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number {text!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError(f"number must not be negative: {text!r}")
    return value


def _env_defaults(env: Mapping[str, str]) -> dict[str, str | None]:
    return {dest: env.get(var, _DEFAULTS[dest]) for dest, var in _ENV_VARS.items()}


def add_config_arguments(parser: argparse.ArgumentParser) -> argparse._ArgumentGroup:
    """Add the runtime options to ``parser``, with defaults from the environment."""
    defaults = _env_defaults(os.environ)
    group = parser.add_argument_group(HELP_HEADING)
    group.add_argument(
        "-s",
        "--serializer",
        type=_enum_type(Serializer),
        default=defaults["serializer"],
        help="Serialization format to use [env: PALADIN_SERIALIZER]",
    )
    group.add_argument(
        "-r",
        "--runtime",
        type=_enum_type(RuntimeKind),
        default=defaults["runtime"],
        help="Runtime environment to use [env: PALADIN_RUNTIME]",
    )
    group.add_argument(
        "-n",
        "--num-workers",
        dest="num_workers",
        type=_non_negative_int,
        default=defaults["num_workers"],
        help="Number of worker threads (in-memory runtime only) [env: PALADIN_NUM_WORKERS]",
    )
    group.add_argument(
        "--amqp-uri",
        dest="amqp_uri",
        default=defaults["amqp_uri"],
        help="URI of the AMQP broker; required with the amqp runtime [env: PALADIN_AMQP_URI]",
    )
    group.add_argument(
        "--task-bus-routing-key",
        dest="task_bus_routing_key",
        default=defaults["task_bus_routing_key"],
        help="Routing key for workers to listen on [env: PALADIN_TASK_BUS_ROUTING_KEY]",
    )
    return group


def config_from_namespace(namespace: argparse.Namespace) -> Config:
    """Build a :class:`Config` from parsed arguments.

    Raises ValueError when the amqp runtime is selected without a broker URI.
    """
    config = Config(
        serializer=namespace.serializer,
        runtime=namespace.runtime,
        num_workers=namespace.num_workers,
        amqp_uri=namespace.amqp_uri,
        task_bus_routing_key=namespace.task_bus_routing_key,
    )
    if config.runtime is RuntimeKind.AMQP and config.amqp_uri is None:
        raise ValueError("the following arguments are required: --amqp-uri")
    return config


def parse_config(
    argv: Sequence[str] | None = None, env: Mapping[str, str] | None = None
) -> Config:
    """Parse a :class:`Config` from ``argv`` and ``env`` (process values by default)."""
    parser = argparse.ArgumentParser()
    add_config_arguments(parser)
    if env is not None:
        parser.set_defaults(**_env_defaults(env))
    namespace = parser.parse_args(argv)
    try:
        return config_from_namespace(namespace)
    except ValueError as exc:
        parser.error(str(exc))