"""Tests for Loguru configuration."""

import json
from pathlib import Path

from loguru import logger

from core.correlation import set_correlation_id
from core.logging_config import configure_logging, correlation_filter


class TestCorrelationFilter:
    def test_adds_current_id(self) -> None:
        set_correlation_id("abcd1234")
        record = {"extra": {}}

        assert correlation_filter(record) is True
        assert record["extra"]["correlation_id"] == "abcd1234"

    def test_placeholder_outside_request(self) -> None:
        set_correlation_id("")
        record = {"extra": {}}

        correlation_filter(record)

        assert record["extra"]["correlation_id"] == "-"


class TestConfigureLogging:
    def teardown_method(self) -> None:
        configure_logging("test", log_dir=None)

    def test_file_sink_is_json_outside_development(self, tmp_path: Path) -> None:
        configure_logging("production", log_dir=tmp_path)
        set_correlation_id("feedf00d")

        logger.info("Contact form submitted")
        logger.complete()

        lines = (tmp_path / "app.log").read_text().splitlines()
        record = json.loads(lines[-1])
        assert record["record"]["message"] == "Contact form submitted"
        assert record["record"]["extra"]["correlation_id"] == "feedf00d"

    def test_no_file_sink_without_log_dir(self, tmp_path: Path) -> None:
        configure_logging("development", log_dir=None)

        logger.info("console only")

        assert list(tmp_path.iterdir()) == []
