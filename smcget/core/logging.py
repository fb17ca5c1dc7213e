# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Logging for smc-get.

Everything below the `smcget` logger goes to stderr so that stdout stays
free for listings and search results. Repositories and operations log
through module loggers; PackageManager adds one event per batch
(`install`, `uninstall`, `update`) and per `build`/`install_file`, whose
fields (succeeded and failed package names, archive paths) become JSON
keys when `log_format: json` is configured.
"""

import logging
import json
import sys
from datetime import datetime, UTC
from typing import Optional, Any
from pathlib import Path

# Attributes every LogRecord carries; anything else came in through `extra`.
_RESERVED_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName",
    "relativeCreated", "thread", "threadName", "exc_info",
    "exc_text", "stack_info", "taskName"
}


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    Operation events carry their `extra` fields (package names, archive
    paths) as top-level keys next to timestamp, level, logger and message.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Single-line terminal format, the default `log_format`."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )


def get_logger(
    name: str,
    log_level: str = "INFO",
    log_format: str = "text",
    log_file: Optional[Path] = None
) -> logging.Logger:
    """
    Configure a logger, normally `smcget` itself, from the loaded Config.

    Calling it again replaces the handlers, so a PackageManager created with
    a different log level or format takes over cleanly.

    Args:
        name: Logger name
        log_level: Config.log_level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Config.log_format, "json" or "text"
        log_file: Also append records to this file

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    if log_format == "json":
        formatter = JSONFormatter()
    else:
        formatter = TextFormatter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def log_event(
    logger: logging.Logger,
    event: str,
    level: str = "INFO",
    **kwargs: Any
) -> None:
    """
    Log an operation event such as `install` or `build`.

    Args:
        logger: Logger instance
        event: Operation name, used as the message
        level: Log level; batch reports with failures use WARNING
        **kwargs: Fields of the event (package names, paths)
    """
    log_func = getattr(logger, level.lower())
    log_func(event, extra=kwargs)
