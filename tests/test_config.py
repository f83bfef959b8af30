import argparse

import pytest

from paladin.config import (
    Config,
    RuntimeKind,
    Serializer,
    add_config_arguments,
    config_from_namespace,
    parse_config,
)


def test_config_defaults():
    config = Config()
    assert config.serializer is Serializer.POSTCARD
    assert config.runtime is RuntimeKind.AMQP
    assert config.num_workers is None
    assert config.amqp_uri is None
    assert config.task_bus_routing_key is None


def test_parse_defaults_with_amqp_uri():
    config = parse_config(["--amqp-uri", "amqp://localhost:5672"], env={})
    assert config == Config(amqp_uri="amqp://localhost:5672")


def test_parse_in_memory_without_uri():
    config = parse_config(["--runtime", "in-memory", "-n", "4"], env={})
    assert config.runtime is RuntimeKind.IN_MEMORY
    assert config.num_workers == 4
    assert config.amqp_uri is None


def test_amqp_runtime_requires_uri():
    with pytest.raises(SystemExit) as excinfo:
        parse_config([], env={})
    assert excinfo.value.code == 2


def test_values_from_environment():
    env = {
        "PALADIN_SERIALIZER": "cbor",
        "PALADIN_RUNTIME": "in-memory",
        "PALADIN_NUM_WORKERS": "3",
        "PALADIN_TASK_BUS_ROUTING_KEY": "tasks",
    }
    config = parse_config([], env=env)
    assert config.serializer is Serializer.CBOR
    assert config.runtime is RuntimeKind.IN_MEMORY
    assert config.num_workers == 3
    assert config.task_bus_routing_key == "tasks"


def test_environment_supplies_amqp_uri():
    config = parse_config([], env={"PALADIN_AMQP_URI": "amqp://localhost:5672"})
    assert config.amqp_uri == "amqp://localhost:5672"
    assert config.runtime is RuntimeKind.AMQP


def test_arguments_override_environment():
    env = {"PALADIN_SERIALIZER": "cbor", "PALADIN_RUNTIME": "in-memory"}
    config = parse_config(["-s", "postcard"], env=env)
    assert config.serializer is Serializer.POSTCARD
    assert config.runtime is RuntimeKind.IN_MEMORY


def test_invalid_serializer_is_rejected():
    with pytest.raises(SystemExit):
        parse_config(["-s", "json", "-r", "in-memory"], env={})


def test_invalid_runtime_in_environment_is_rejected():
    with pytest.raises(SystemExit):
        parse_config([], env={"PALADIN_RUNTIME": "bogus"})


def test_negative_worker_count_is_rejected():
    with pytest.raises(SystemExit):
        parse_config(["-r", "in-memory", "-n", "-1"], env={})


def test_add_config_arguments_on_custom_parser():
    parser = argparse.ArgumentParser()
    add_config_arguments(parser)
    parser.add_argument("--timeout", type=int)
    namespace = parser.parse_args(
        ["--runtime", "in-memory", "--serializer", "cbor", "--timeout", "5"]
    )
    config = config_from_namespace(namespace)
    assert config.runtime is RuntimeKind.IN_MEMORY
    assert config.serializer is Serializer.CBOR
    assert namespace.timeout == 5


def test_config_from_namespace_requires_uri_for_amqp():
    namespace = argparse.Namespace(
        serializer=Serializer.POSTCARD,
        runtime=RuntimeKind.AMQP,
        num_workers=None,
        amqp_uri=None,
        task_bus_routing_key=None,
    )
    with pytest.raises(ValueError, match="--amqp-uri"):
        config_from_namespace(namespace)


def test_enum_values_round_trip():
    for member in Serializer:
        assert Serializer(member.value) is member
    for member in RuntimeKind:
        assert RuntimeKind(member.value) is member