"""Configuration loading for the beelay CLI."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from typing import Mapping, Optional


ENV_PREFIX = "BEELAY_"
SERVER_ENVVAR = f"{ENV_PREFIX}SERVER"
DEFAULT_SERVER_ADDRESS = "http://localhost:9999"

OUTPUT_FORMATS = ("text", "json", "yaml")
LOG_FORMATS = ("plain", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ClientConfig:
    """Resolved settings for a single CLI invocation."""

    server_address: str = DEFAULT_SERVER_ADDRESS + "/"
    output: str = "text"
    log_level: str = "WARNING"
    log_format: str = "plain"
    timeout: float = 10.0

    def __post_init__(self) -> None:
        _validate_choice("output", self.output, OUTPUT_FORMATS)
        _validate_choice("log_format", self.log_format, LOG_FORMATS)
        _validate_choice("log_level", self.log_level.upper(), LOG_LEVELS)

    @classmethod
    def from_args(
        cls,
        args: argparse.Namespace,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ClientConfig":
        """Build a config from parsed CLI arguments, falling back to ``BEELAY_*`` env vars."""

        env = os.environ if environ is None else environ
        server_address = resolve_server_address(
            getattr(args, "server", None),
            env.get(SERVER_ENVVAR),
            DEFAULT_SERVER_ADDRESS,
        )
        return cls(
            server_address=server_address,
            output=_first(getattr(args, "output", None), env.get(f"{ENV_PREFIX}OUTPUT"), "text"),
            log_level=_first(
                getattr(args, "log_level", None), env.get(f"{ENV_PREFIX}LOG_LEVEL"), "WARNING"
            ).upper(),
            log_format=_first(
                getattr(args, "log_format", None), env.get(f"{ENV_PREFIX}LOG_FORMAT"), "plain"
            ),
        )


def normalize_server_address(address: str) -> str:
    """Ensure ``address`` starts with ``http://`` and ends with ``/``.

    Only the literal ``http://`` prefix is recognized; an ``https://`` address
    still gets ``http://`` prepended.
    """

    if not address.startswith("http://"):
        address = f"http://{address}"
    if not address.endswith("/"):
        address = f"{address}/"
    return address


def resolve_server_address(
    explicit: Optional[str],
    environment_value: Optional[str],
    default: str = DEFAULT_SERVER_ADDRESS,
) -> str:
    """Pick the server address by precedence (flag, env, default) and normalize it."""

    return normalize_server_address(_first(explicit, environment_value, default))


def _first(explicit: Optional[str], fallback: Optional[str], default: str) -> str:
    if explicit is not None:
        return explicit
    if fallback is not None:
        return fallback
    return default


def _validate_choice(name: str, value: str, allowed: tuple) -> None:
    if value not in allowed:
        raise ValueError(f"{name} must be one of {list(allowed)}; got {value}.")
