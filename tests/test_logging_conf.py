from __future__ import annotations

import json
import logging

from qrisgen.logging_conf import JsonFormatter, logging_dict_config


def test_json_formatter_merges_extra_fields() -> None:
    record = logging.LogRecord("qrisgen.test", logging.WARNING, __file__, 1, "payload %s", ("rejected",), None)
    record.code = "ERR_BAD_CRC"

    data = json.loads(JsonFormatter().format(record))

    assert data["level"] == "WARNING"
    assert data["logger"] == "qrisgen.test"
    assert data["message"] == "payload rejected"
    assert data["code"] == "ERR_BAD_CRC"
    assert "args" not in data


def test_dict_config_switches_formatter() -> None:
    assert logging_dict_config("DEBUG", True)["formatters"]["default"] == {"()": JsonFormatter}
    plain = logging_dict_config("INFO", False)
    assert "format" in plain["formatters"]["default"]
    assert plain["handlers"]["default"]["level"] == "INFO"
