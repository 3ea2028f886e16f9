"""Tests for the system logger."""

import json
import logging
import sys
from pathlib import Path

import pytest

from acp_identity.config import LoggingConfig
from acp_identity.telemetry.system_logger import (
    JsonLineFormatter,
    configure_system_logger,
    get_system_log_path,
    get_system_logger,
)


@pytest.fixture
def restore_system_logger():
    """Undo configure_system_logger() so later tests still see records in caplog."""
    yield
    logger = get_system_logger()
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def _record(msg: object, level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord("acp_identity.system", level, __file__, 1, msg, None, None)


class TestJsonLineFormatter:
    def test_dict_message_is_merged(self):
        # Act
        line = JsonLineFormatter().format(_record({"event": "token_revoked", "backend": "gitlab"}))

        # Assert
        entry = json.loads(line)
        assert entry["event"] == "token_revoked"
        assert entry["backend"] == "gitlab"
        assert entry["level"] == "INFO"
        assert entry["time"].endswith("Z")

    def test_string_message_goes_to_message_field(self):
        entry = json.loads(JsonLineFormatter().format(_record("plain text", logging.WARNING)))

        assert entry["message"] == "plain text"
        assert entry["level"] == "WARNING"

    def test_exception_info_is_included(self):
        # Arrange
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, {"event": "failed"}, None, sys.exc_info())

        # Act
        entry = json.loads(JsonLineFormatter().format(record))

        # Assert
        assert entry["error_type"] == "RuntimeError"
        assert entry["error_message"] == "boom"


class TestConfigureSystemLogger:
    def test_writes_jsonl_file_when_log_dir_set(self, tmp_path: Path, restore_system_logger):
        # Arrange
        config = LoggingConfig(log_dir=str(tmp_path), log_level="DEBUG")

        # Act
        logger = configure_system_logger(config)
        logger.debug({"event": "groups_resolved", "backend": "gitlab"})
        for handler in logger.handlers:
            handler.flush()

        # Assert
        path = get_system_log_path(config)
        assert path == tmp_path / "acp_identity_logs" / "system.jsonl"
        entry = json.loads(path.read_text().splitlines()[-1])
        assert entry["event"] == "groups_resolved"

    def test_info_level_drops_debug(self, tmp_path: Path, restore_system_logger):
        # Arrange
        config = LoggingConfig(log_dir=str(tmp_path), log_level="INFO")

        # Act
        logger = configure_system_logger(config)
        logger.debug({"event": "groups_resolved"})
        for handler in logger.handlers:
            handler.flush()

        # Assert
        assert get_system_log_path(config).read_text() == ""

    def test_reconfigure_replaces_handlers(self, restore_system_logger):
        # Act
        configure_system_logger(LoggingConfig())
        logger = configure_system_logger(LoggingConfig())

        # Assert
        assert len(logger.handlers) == 1

    def test_log_path_requires_log_dir(self):
        with pytest.raises(ValueError):
            get_system_log_path(LoggingConfig())
