import json
import logging

from beelay_cli.config import ClientConfig
from beelay_cli.logging import JsonFormatter, configure_logging, get_logger


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord(
        name="beelay.http",
        level=logging.DEBUG,
        pathname=__file__,
        lineno=1,
        msg="Received response",
        args=(),
        exc_info=None,
    )
    record.status = 404
    record.url = "http://test/api/switch/foo"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "DEBUG"
    assert payload["logger"] == "beelay.http"
    assert payload["message"] == "Received response"
    assert payload["status"] == 404
    assert payload["url"] == "http://test/api/switch/foo"
    assert "lineno" not in payload


def test_configure_logging_sets_level() -> None:
    configure_logging(ClientConfig(log_level="DEBUG"))
    assert get_logger("beelay").level == logging.DEBUG
    assert get_logger("beelay.cli").isEnabledFor(logging.DEBUG)

    configure_logging(ClientConfig())
    assert not get_logger("beelay.cli").isEnabledFor(logging.INFO)


def test_debug_logging_goes_to_stderr(capsys) -> None:
    configure_logging(ClientConfig(log_level="DEBUG", log_format="json"))
    get_logger("beelay.cli").debug("Resolved configuration", extra={"command": "list"})

    line = capsys.readouterr().err.strip().splitlines()[-1]
    assert json.loads(line)["command"] == "list"

    configure_logging(ClientConfig())
