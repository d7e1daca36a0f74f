"""
Tests for CLI logging setup and formatters.
"""

import json
import logging
import sys

import pytest

from teamtack.cli.logging import JSONFormatter, TextFormatter, setup_logging


def _record(msg="Synced 3 task(s)", level=logging.INFO, exc_info=None, **extra):
    record = logging.LogRecord(
        name="SyncOrchestrator",
        level=level,
        pathname="orchestrator.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_basic_fields(self):
        entry = json.loads(JSONFormatter().format(_record()))

        assert entry["level"] == "INFO"
        assert entry["logger"] == "SyncOrchestrator"
        assert entry["message"] == "Synced 3 task(s)"
        assert entry["timestamp"].endswith("Z")
        assert "location" not in entry

    def test_optional_fields(self):
        formatter = JSONFormatter(
            include_timestamp=False,
            include_level=False,
            include_location=True,
            static_fields={"app": "ttt"},
        )

        entry = json.loads(formatter.format(_record()))

        assert "timestamp" not in entry
        assert "level" not in entry
        assert entry["app"] == "ttt"
        assert entry["location"]["line"] == 42

    def test_extra_fields_become_context(self):
        entry = json.loads(JSONFormatter().format(_record(issue_key="MP-1")))

        assert entry["context"] == {"issue_key": "MP-1"}

    def test_exception(self):
        try:
            raise ValueError("bad status")
        except ValueError:
            record = _record(level=logging.ERROR, exc_info=sys.exc_info())

        entry = json.loads(JSONFormatter().format(record))

        assert entry["exception"]["type"] == "ValueError"
        assert entry["exception"]["message"] == "bad status"
        assert "Traceback" in entry["exception"]["traceback"]


class TestTextFormatter:
    """Tests for TextFormatter."""

    def test_plain(self):
        line = TextFormatter(use_colors=False).format(_record())

        assert "INFO SyncOrchestrator: Synced 3 task(s)" in line
        assert "\033[" not in line

    def test_colored_level(self):
        line = TextFormatter(use_colors=True).format(_record(level=logging.WARNING))

        assert "\033[33mWARNING\033[0m" in line

    def test_context(self):
        line = TextFormatter(use_colors=False, include_context=True).format(
            _record(issue_key="MP-1")
        )

        assert line.endswith("issue_key=MP-1")


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_replaces_handlers(self, restore_root_logger):
        setup_logging(level=logging.DEBUG)
        setup_logging(level=logging.WARNING)

        assert len(restore_root_logger.handlers) == 1
        assert restore_root_logger.level == logging.WARNING

    def test_json_format(self, restore_root_logger):
        setup_logging(log_format="json")

        assert isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)

    def test_log_file(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "ttt.log"
        setup_logging(level=logging.INFO, log_file=str(log_file))

        logging.getLogger("CycleStore").info("Saved 2 task(s)")
        for handler in restore_root_logger.handlers:
            handler.flush()

        assert "CycleStore: Saved 2 task(s)" in log_file.read_text()

    def test_quiets_http_loggers(self, restore_root_logger):
        setup_logging(level=logging.DEBUG)

        assert logging.getLogger("urllib3").level == logging.WARNING
