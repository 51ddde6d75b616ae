"""Command-line client for reading and changing switches on a beelay server."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Callable, Iterable, Optional, Type, TypeVar

import httpx
import yaml

from .config import (
    DEFAULT_SERVER_ADDRESS,
    LOG_FORMATS,
    LOG_LEVELS,
    OUTPUT_FORMATS,
    SERVER_ENVVAR,
    ClientConfig,
)
from .logging import configure_logging, get_logger
from .models import ErrorResponse, ParseError, SwitchList, SwitchState


logger = get_logger("beelay.cli")
http_logger = get_logger("beelay.http")

_Model = TypeVar("_Model", SwitchState, SwitchList)


class CliError(Exception):
    """Raised when a beelay request fails in an expected way."""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="beelay",
        description=(
            "Beelay CLI client. Reads and changes switch state on a beelay server. "
            f"The server address defaults to ${SERVER_ENVVAR}, then {DEFAULT_SERVER_ADDRESS}."
        ),
    )
    parser.add_argument(
        "-s",
        "--server",
        help=f"beelay server address (env: {SERVER_ENVVAR})",
    )
    parser.add_argument(
        "-o",
        "--output",
        choices=OUTPUT_FORMATS,
        help="Output format (env: BEELAY_OUTPUT). Defaults to 'text'.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Diagnostic log level on stderr (env: BEELAY_LOG_LEVEL). Defaults to WARNING.",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        help="Diagnostic log format (env: BEELAY_LOG_FORMAT). Defaults to 'plain'.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    get = subparsers.add_parser(
        "get",
        help="get switch state (GET /api/switch/{name})",
        description="Prints the switch state and whether a change is in progress.",
    )
    get.add_argument("switch_name", help="switch name")
    get.set_defaults(func=_cmd_get)

    set_cmd = subparsers.add_parser(
        "set",
        help="set switch state (POST /api/switch/{name}?state=...)",
        description="Requests a state change and prints the resulting switch state.",
    )
    set_cmd.add_argument("switch_name", help="switch name")
    set_cmd.add_argument("state", help='state ("on" or "off")')
    set_cmd.add_argument(
        "-d",
        "--delay",
        help="state change delay (accepted but not sent to the server)",
    )
    set_cmd.set_defaults(func=_cmd_set)

    list_cmd = subparsers.add_parser(
        "list",
        help="list switches (GET /api/switches/)",
        description="Prints the switch names in server order.",
    )
    list_cmd.set_defaults(func=_cmd_list)

    return parser


def build_switch_url(server_address: str, switch_name: str) -> str:
    # Only spaces are escaped; everything else goes into the path as typed.
    return f"{server_address}api/switch/{switch_name.replace(' ', '%20')}"


def build_switches_url(server_address: str) -> str:
    return f"{server_address}api/switches/"


def _log_request(request: httpx.Request) -> None:
    http_logger.debug("Sending request", extra={"method": request.method, "url": str(request.url)})


def _log_response(response: httpx.Response) -> None:
    http_logger.debug(
        "Received response",
        extra={
            "method": response.request.method,
            "url": str(response.request.url),
            "status": response.status_code,
        },
    )


def _build_client(config: ClientConfig) -> httpx.Client:
    return httpx.Client(
        timeout=config.timeout,
        event_hooks={"request": [_log_request], "response": [_log_response]},
    )


def _read_text(response: httpx.Response) -> str:
    try:
        response.read()
    except (httpx.TransportError, httpx.StreamError) as exc:
        raise CliError("Failed to get text body from response") from exc
    return response.text


def _status_line(response: httpx.Response) -> str:
    return f"{response.status_code} {response.reason_phrase}".strip()


def _raise_for_error(response: httpx.Response) -> None:
    """Turn a non-2xx response into a ``CliError`` carrying the server's message."""

    if response.is_success:
        return
    status = _status_line(response)
    text = _read_text(response)
    try:
        error = ErrorResponse.from_json(text)
    except ParseError as exc:
        raise CliError(f"Could not retrieve error message for {status} response: {exc}") from exc
    raise CliError(f"{status} response: {error.error_message}")


def _parse_response(response: httpx.Response, model: Type[_Model]) -> _Model:
    _raise_for_error(response)
    text = _read_text(response)
    try:
        return model.from_json(text)
    except ParseError as exc:
        raise CliError(f"Failed to parse response: {exc}") from exc


def _request(
    client: httpx.Client,
    model: Type[_Model],
    method: str,
    url: str,
    **kwargs: Any,
) -> _Model:
    # Streamed so a body that fails mid-read surfaces from _read_text.
    response = client.send(client.build_request(method, url, **kwargs), stream=True)
    try:
        return _parse_response(response, model)
    finally:
        response.close()


def _print_structured(data: Any, output: str) -> None:
    if output == "yaml":
        yaml.safe_dump(data, sys.stdout, sort_keys=False)
    else:
        json.dump(data, sys.stdout, indent=2)
        sys.stdout.write("\n")


def _print_switch_state(switch: SwitchState, output: str) -> None:
    if output != "text":
        _print_structured(switch.model_dump(), output)
        return
    sys.stdout.write(f"state         : {switch.state}\n")
    sys.stdout.write(f"transitioning : {switch.transitioning}\n")


def _print_switch_list(switch_list: SwitchList, output: str) -> None:
    if output != "text":
        _print_structured(switch_list.model_dump(), output)
        return
    sys.stdout.write("Switch list:\n")
    for name in switch_list.switches:
        sys.stdout.write(f"    {name}\n")


def get_switch(config: ClientConfig, client: httpx.Client, switch_name: str) -> SwitchState:
    """Fetch and print the state of ``switch_name``."""

    switch = _request(client, SwitchState, "GET", build_switch_url(config.server_address, switch_name))
    _print_switch_state(switch, config.output)
    return switch


def set_switch(
    config: ClientConfig,
    client: httpx.Client,
    switch_name: str,
    state: str,
    delay: Optional[str] = None,
) -> SwitchState:
    """Request ``state`` for ``switch_name`` and print what the server reports.

    ``delay`` is accepted for command-line compatibility; the server API has
    no field for it, so it is not sent.
    """

    if delay is not None:
        logger.debug("Ignoring delay option", extra={"delay": delay})
    switch = _request(
        client,
        SwitchState,
        "POST",
        build_switch_url(config.server_address, switch_name),
        params={"state": state},
    )
    _print_switch_state(switch, config.output)
    return switch


def list_switches(config: ClientConfig, client: httpx.Client) -> SwitchList:
    """Fetch and print every switch name known to the server."""

    switch_list = _request(client, SwitchList, "GET", build_switches_url(config.server_address))
    _print_switch_list(switch_list, config.output)
    return switch_list


def _cmd_get(config: ClientConfig, client: httpx.Client, args: argparse.Namespace) -> None:
    get_switch(config, client, args.switch_name)


def _cmd_set(config: ClientConfig, client: httpx.Client, args: argparse.Namespace) -> None:
    set_switch(config, client, args.switch_name, args.state, delay=args.delay)


def _cmd_list(config: ClientConfig, client: httpx.Client, args: argparse.Namespace) -> None:
    list_switches(config, client)


def _report_error(exc: Exception) -> None:
    sys.stderr.write("Error during beelay request:\n")
    sys.stderr.write(f"    {exc}\n")


def main(argv: Optional[Iterable[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(args=argv)

    try:
        config = ClientConfig.from_args(args)
    except ValueError as exc:
        parser.error(str(exc))
    configure_logging(config)
    logger.debug(
        "Resolved configuration",
        extra={"server_address": config.server_address, "command": args.command},
    )

    try:
        with _build_client(config) as client:
            func: Callable[[ClientConfig, httpx.Client, argparse.Namespace], None] = args.func
            func(config, client, args)
    except (CliError, httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.debug("Request failed", exc_info=True)
        _report_error(exc)


if __name__ == "__main__":
    main()
