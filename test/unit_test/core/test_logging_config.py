"""Unit tests for the logging configuration module.

Covers console/file handler setup, format selection, per-module levels and
runtime level changes driven by the ``logLevel`` dashboard setting.
"""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from fauxdash.core import logging_config
from fauxdash.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    get_logger,
    set_log_level,
    setup_logging,
)


def _console_handler() -> logging.Handler:
    return next(
        h
        for h in logging.getLogger().handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    )


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    fauxdash_level = logging.getLogger("fauxdash").level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    logging.getLogger("fauxdash").setLevel(fauxdash_level)


class TestSetupLogging:
    @pytest.mark.parametrize(
        "log_level,expected_level",
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("error", logging.ERROR),
        ],
    )
    def test_console_level(self, log_level, expected_level):
        setup_logging(log_level=log_level, enable_file=False)
        assert _console_handler().level == expected_level
        assert logging.getLogger().level == logging.DEBUG

    @pytest.mark.parametrize(
        "log_format,expected_format",
        [("simple", SIMPLE_FORMAT), ("detailed", DETAILED_FORMAT), ("json", JSON_FORMAT), ("other", DETAILED_FORMAT)],
    )
    def test_format(self, log_format, expected_format):
        setup_logging(log_format=log_format, enable_file=False)
        assert _console_handler().formatter._fmt == expected_format

    def test_replaces_existing_handlers(self):
        setup_logging(enable_file=False)
        setup_logging(enable_file=False)
        assert len(logging.getLogger().handlers) == 1

    def test_module_levels_applied(self):
        setup_logging(enable_file=False)
        for name, level in MODULE_LOG_LEVELS.items():
            assert logging.getLogger(name).level == logging.getLevelName(level)

    def test_file_handler(self, tmp_path: Path):
        with patch.object(logging_config, "LOG_FILE_DIR", str(tmp_path / "logs")), patch.object(
            logging_config, "ENABLE_FILE_LOGGING", True
        ):
            setup_logging(log_level="INFO", enable_file=True)

        file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].level == logging.DEBUG
        assert Path(file_handlers[0].baseFilename) == tmp_path / "logs" / "fauxdash.log"

    def test_file_logging_disabled_by_environment(self, tmp_path: Path):
        with patch.object(logging_config, "LOG_FILE_DIR", str(tmp_path / "logs")), patch.object(
            logging_config, "ENABLE_FILE_LOGGING", False
        ):
            setup_logging(enable_file=True)

        assert not any(isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers)
        assert not (tmp_path / "logs").exists()


class TestSetLogLevel:
    @pytest.mark.parametrize(
        "requested,expected",
        [("debug", logging.DEBUG), ("info", logging.INFO), ("warn", logging.WARNING), ("ERROR", logging.ERROR)],
    )
    def test_dashboard_values(self, requested, expected):
        setup_logging(log_level="INFO", enable_file=False)

        assert set_log_level(requested) is True
        assert _console_handler().level == expected
        assert logging.getLogger("fauxdash").level == expected

    def test_unknown_level_is_rejected(self):
        setup_logging(log_level="INFO", enable_file=False)

        assert set_log_level("verbose") is False
        assert _console_handler().level == logging.INFO


def test_get_logger_returns_named_logger():
    logger = get_logger("fauxdash.geoip.chain")
    assert logger is logging.getLogger("fauxdash.geoip.chain")
