"""Unit tests for logging infrastructure."""

import json
import logging
import sys
from pathlib import Path

import pytest

from precommit_runner.runner_logging import (
    JSONFormatter,
    LogCategory,
    get_category_logger,
    get_logger,
    setup_logging,
)


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_default_setup(self, tmp_path: Path) -> None:
        log_file = tmp_path / "test.log"
        logger = setup_logging(log_file=log_file)

        logger.info("Test message")

        assert logger.name == "precommit_runner"
        assert "Test message" in log_file.read_text()

    def test_no_file_handler_without_log_file(self) -> None:
        logger = setup_logging()

        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_json_format(self, tmp_path: Path) -> None:
        log_file = tmp_path / "json.log"
        setup_logging(log_file=log_file, log_format="json")

        get_category_logger(LogCategory.CHECKS).info(
            "lint passed", extra={"check": "lint", "duration_ms": 12.5}
        )

        log_entry = json.loads(log_file.read_text().strip().split("\n")[-1])
        assert log_entry["message"] == "lint passed"
        assert log_entry["level"] == "INFO"
        assert log_entry["logger"] == "precommit_runner.checks"
        assert log_entry["check"] == "lint"
        assert log_entry["duration_ms"] == 12.5

    def test_text_format_default(self, tmp_path: Path) -> None:
        log_file = tmp_path / "text.log"
        setup_logging(log_file=log_file)

        get_logger().info("Text test message")

        content = log_file.read_text()
        assert "|" in content
        with pytest.raises(json.JSONDecodeError):
            json.loads(content.strip().split("\n")[-1])

    def test_quiet_mode_keeps_file_logging(self, tmp_path: Path) -> None:
        """Quiet only affects the console; the file still logs everything."""
        log_file = tmp_path / "quiet.log"
        logger = setup_logging(log_file=log_file, quiet=True)

        logger.info("Info message")

        assert "Info message" in log_file.read_text()
        console = next(h for h in logger.handlers if not isinstance(h, logging.FileHandler))
        assert console.level == logging.ERROR

    def test_verbose_console(self) -> None:
        logger = setup_logging(verbose=True)
        assert logger.handlers[0].level == logging.DEBUG

    def test_file_level(self, tmp_path: Path) -> None:
        log_file = tmp_path / "level.log"
        logger = setup_logging(log_file=log_file, file_level="warning")

        logger.info("not written")
        logger.warning("written")

        content = log_file.read_text()
        assert "written" in content
        assert "not written" not in content


class TestJSONFormatter:
    """Tests for JSON log formatter."""

    def test_includes_exception(self) -> None:
        formatter = JSONFormatter()
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord(
                "precommit_runner", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
            )

        entry = json.loads(formatter.format(record))
        assert entry["message"] == "failed"
        assert "ValueError: boom" in entry["exception"]

    def test_omits_missing_extras(self) -> None:
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        entry = json.loads(JSONFormatter().format(record))
        assert "check" not in entry
        assert "file_count" not in entry


class TestCategoryLoggers:
    """Tests for category loggers."""

    @pytest.mark.parametrize("category", list(LogCategory))
    def test_category_logger_is_child_of_package_logger(self, category) -> None:
        logger = get_category_logger(category)
        assert logger.name == f"precommit_runner.{category.value}"
        assert logger.parent is get_logger()
