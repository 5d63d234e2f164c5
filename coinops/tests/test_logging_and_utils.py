from __future__ import annotations

import io
import json
import logging
from datetime import datetime, timedelta, timezone

from coinops.config.logging_config import JsonFormatter, configure_logging
from coinops.utils.time import format_uptime, iso_z


def test_json_formatter_includes_request_fields():
    record = logging.LogRecord("coinops.request", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    record.request_id = "abc"
    record.status = 200

    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["request_id"] == "abc"
    assert payload["status"] == 200
    assert "path" not in payload


def test_configure_logging_replaces_handlers():
    stream = io.StringIO()
    root = logging.getLogger()
    saved = (root.level, root.handlers[:])
    try:
        configure_logging("debug", use_json=True, stream=stream)
        configure_logging("debug", use_json=True, stream=stream)
        assert len(root.handlers) == 1
        logging.getLogger("coinops.test").debug("ping")
        assert json.loads(stream.getvalue().splitlines()[-1])["message"] == "ping"
    finally:
        root.handlers[:] = saved[1]
        root.setLevel(saved[0])


def test_format_uptime():
    assert format_uptime(0) == "0s"
    assert format_uptime(59.6) == "1m0s"
    assert format_uptime(3723) == "1h2m3s"


def test_iso_z_normalizes_to_utc():
    naive = datetime(2024, 1, 1, 12, 0, 0)
    shifted = datetime(2024, 1, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert iso_z(naive) == "2024-01-01T12:00:00Z"
    assert iso_z(shifted) == "2024-01-01T12:00:00Z"
