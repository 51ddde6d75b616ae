from argparse import Namespace

import pytest

from beelay_cli.config import (
    DEFAULT_SERVER_ADDRESS,
    ClientConfig,
    normalize_server_address,
    resolve_server_address,
)


@pytest.mark.parametrize(
    "address,expected",
    [
        ("localhost:9999", "http://localhost:9999/"),
        ("http://localhost:9999", "http://localhost:9999/"),
        ("http://localhost:9999/", "http://localhost:9999/"),
        ("10.0.0.5/", "http://10.0.0.5/"),
        ("https://secure.example", "http://https://secure.example/"),
    ],
)
def test_normalize_server_address(address: str, expected: str) -> None:
    assert normalize_server_address(address) == expected


@pytest.mark.parametrize("address", ["beelay", "http://beelay", "beelay/", "https://x"])
def test_normalize_is_idempotent(address: str) -> None:
    once = normalize_server_address(address)
    assert normalize_server_address(once) == once
    assert once.count("http://") == address.count("http://") + (0 if address.startswith("http://") else 1)


def test_resolve_prefers_flag_then_env_then_default() -> None:
    assert resolve_server_address("flag:1", "env:2") == "http://flag:1/"
    assert resolve_server_address(None, "env:2") == "http://env:2/"
    assert resolve_server_address(None, None) == "http://localhost:9999/"
    assert resolve_server_address(None, None, DEFAULT_SERVER_ADDRESS) == "http://localhost:9999/"


def test_from_args_reads_environment() -> None:
    args = Namespace(server=None, output=None, log_level=None, log_format=None)
    config = ClientConfig.from_args(
        args,
        environ={
            "BEELAY_SERVER": "relay-box:9999",
            "BEELAY_OUTPUT": "yaml",
            "BEELAY_LOG_LEVEL": "debug",
            "BEELAY_LOG_FORMAT": "json",
        },
    )
    assert config.server_address == "http://relay-box:9999/"
    assert config.output == "yaml"
    assert config.log_level == "DEBUG"
    assert config.log_format == "json"


def test_from_args_flags_override_environment() -> None:
    args = Namespace(server="cli-host", output="json", log_level="INFO", log_format=None)
    config = ClientConfig.from_args(args, environ={"BEELAY_SERVER": "env-host", "BEELAY_OUTPUT": "yaml"})
    assert config.server_address == "http://cli-host/"
    assert config.output == "json"
    assert config.log_level == "INFO"
    assert config.log_format == "plain"


def test_from_args_defaults() -> None:
    config = ClientConfig.from_args(Namespace(server=None), environ={})
    assert config == ClientConfig()
    assert config.server_address == "http://localhost:9999/"


@pytest.mark.parametrize(
    "field,value",
    [
        ("output", "xml"),
        ("log_format", "logfmt"),
        ("log_level", "chatty"),
    ],
)
def test_invalid_values_rejected(field: str, value: str) -> None:
    with pytest.raises(ValueError, match=field):
        ClientConfig(**{field: value})
