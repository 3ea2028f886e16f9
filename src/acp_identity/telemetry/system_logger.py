"""System logger for operational events.

Events are logged as dicts and rendered as one JSON object per line:

    logger.info({"event": "provider_discovered", "provider": "gitlab", ...})

renders as

    {"time": "2026-01-01T12:00:00.000Z", "level": "INFO", "event": "provider_discovered", ...}

Plain string messages are accepted too and land in the "message" field.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from acp_identity.constants import LOGS_SUBDIR, SYSTEM_LOG_FILENAME, SYSTEM_LOGGER_NAME

if TYPE_CHECKING:
    from acp_identity.config import LoggingConfig


class JsonLineFormatter(logging.Formatter):
    """Render dict (or string) log messages as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, object] = {
            "time": timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
        }

        if isinstance(record.msg, dict):
            entry.update(record.msg)
        else:
            entry["message"] = record.getMessage()

        if record.exc_info and "error_type" not in entry:
            exc = record.exc_info[1]
            if exc is not None:
                entry["error_type"] = type(exc).__name__
                entry["error_message"] = str(exc)

        return json.dumps(entry, default=str)


def get_system_logger() -> logging.Logger:
    """Get the shared system logger.

    Handlers are attached by configure_system_logger(). Until then records
    propagate to the root logger (which is what pytest's caplog captures).
    """
    return logging.getLogger(SYSTEM_LOGGER_NAME)


def configure_system_logger(config: "LoggingConfig") -> logging.Logger:
    """Attach stderr (and optional file) handlers to the system logger.

    Safe to call more than once: previously attached handlers are replaced.

    Args:
        config: Logging configuration (level, optional log directory).

    Returns:
        The configured system logger.
    """
    logger = get_system_logger()
    logger.setLevel(config.log_level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = JsonLineFormatter()

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if config.log_dir:
        log_path = get_system_log_path(config)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_system_log_path(config: "LoggingConfig") -> Path:
    """Path of the system.jsonl file for the configured log directory.

    Raises:
        ValueError: If no log directory is configured.
    """
    if not config.log_dir:
        raise ValueError("log_dir is not configured")
    return Path(config.log_dir).expanduser() / LOGS_SUBDIR / SYSTEM_LOG_FILENAME
