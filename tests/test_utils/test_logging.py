"""
Tests for carne_madeira/utils/logging.py.

What we test
------------
  - _JsonFormatter emits one JSON object with ts/level/logger/msg and extras.
  - configure_logging() creates the log file's parent directory and quiets httpx.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from carne_madeira.config import LoggingConfig
from carne_madeira.utils.logging import _JsonFormatter, configure_logging


def test_json_formatter_fields() -> None:
    record = logging.LogRecord("carne_madeira.test", logging.INFO, __file__, 1, "Loaded %d", (3,), None)
    record.dataset = "madeira"
    payload = json.loads(_JsonFormatter().format(record))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "carne_madeira.test"
    assert payload["msg"] == "Loaded 3"
    assert payload["dataset"] == "madeira"
    assert "args" not in payload


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers = handlers
    root.setLevel(level)


def test_configure_logging_file_handler(tmp_path: Path, restore_root_logger) -> None:
    log_file = tmp_path / "logs" / "dashboard.log"
    configure_logging(LoggingConfig(level="DEBUG", log_file=str(log_file), json_format=True))

    logging.getLogger("carne_madeira.test").info("hello")
    for h in logging.getLogger().handlers:
        h.flush()

    assert log_file.exists()
    assert json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])["msg"] == "hello"
    assert logging.getLogger("httpx").level == logging.WARNING
