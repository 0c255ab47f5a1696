"""Tests for logging configuration."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from blendfold.core.utils.logging import StructuredJSONFormatter, configure_logging, get_logger


class TestStructuredJSONFormatter:
    def test_record_fields(self):
        record = logging.LogRecord(
            "blendfold.core.assembly", logging.INFO, __file__, 12, "Removed %s", ("Hat",), None
        )
        record.layer = "Hat"
        entry = json.loads(StructuredJSONFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["message"] == "Removed Hat"
        assert entry["context"]["logger_name"] == "blendfold.core.assembly"
        assert entry["context"]["layer"] == "Hat"
        assert "timestamp" in entry


class TestConfigureLogging:
    def test_level_and_file(self, tmp_path: Path):
        log_file = tmp_path / "blendfold.log"
        configure_logging(level="debug", filename=str(log_file))
        try:
            assert logging.getLogger().level == logging.DEBUG
            logging.getLogger("blendfold.test").debug("hello")
            logging.getLogger().handlers[0].flush()
            assert "hello" in log_file.read_text(encoding="utf-8")
        finally:
            configure_logging(level="WARNING")

    def test_structured(self, tmp_path: Path):
        log_file = tmp_path / "blendfold.jsonl"
        configure_logging(level="INFO", filename=str(log_file), structured=True)
        try:
            logging.getLogger("blendfold.test").info("structured")
            logging.getLogger().handlers[0].flush()
            entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
            assert entry["message"] == "structured"
        finally:
            configure_logging(level="WARNING")


def test_get_logger_with_context():
    adapter = get_logger("blendfold.test", layer="Hat")
    assert isinstance(adapter, logging.LoggerAdapter)
    assert adapter.extra == {"layer": "Hat"}
    assert isinstance(get_logger("blendfold.test"), logging.Logger)
