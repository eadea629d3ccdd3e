"""
Tests for structured logging setup.
"""

from __future__ import annotations

import json
import logging

import pytest
import structlog
from structlog.contextvars import bound_contextvars

from pagebrief.config import MonitoringConfig
from pagebrief.observability import configure_logging

pytestmark = pytest.mark.usefixtures("restore_logging")


@pytest.mark.unit
class TestConfigureLogging:
    def test_json_lines_to_file(self, temp_dir):
        log_file = temp_dir / "logs" / "pagebrief.log"
        configure_logging(MonitoringConfig(log_level="DEBUG", log_file=str(log_file)))

        with bound_contextvars(request_key="a" * 64):
            structlog.get_logger("pagebrief.test").info("Summary generated", formats=7)
        for handler in logging.getLogger().handlers:
            handler.flush()

        records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
        event = next(r for r in records if r["event"] == "Summary generated")
        assert event["formats"] == 7
        assert event["request_key"] == "a" * 16
        assert event["level"] == "info"
        assert event["logger"] == "pagebrief.test"

    def test_level_filters(self, temp_dir):
        log_file = temp_dir / "quiet.log"
        configure_logging(MonitoringConfig(log_level="WARNING", log_file=str(log_file)))

        structlog.get_logger("pagebrief.test").info("hidden")
        structlog.get_logger("pagebrief.test").warning("shown")
        for handler in logging.getLogger().handlers:
            handler.flush()

        contents = log_file.read_text(encoding="utf-8")
        assert "shown" in contents
        assert "hidden" not in contents
