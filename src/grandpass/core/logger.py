"""Logging for the GrandPass front-end.

Module loggers live under ``grandpass``. The console shows ``[OK]`` for info
lines so guard and department operators can read scan logs at a glance; the
optional ``LOG_FILE`` keeps timestamps and logger names.
"""
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "grandpass"

_LABELS = {logging.INFO: "OK"}


class LogFormatter(logging.Formatter):
    def __init__(self, *, timestamped: bool = False):
        super().__init__()
        self.timestamped = timestamped

    def format(self, record: logging.LogRecord) -> str:
        if self.timestamped:
            head = f"[{record.levelname}] {self.formatTime(record, '%Y-%m-%d %H:%M:%S')} - {record.name} -"
        else:
            head = f"[{_LABELS.get(record.levelno, record.levelname)}]"
        text = f"{head} {record.getMessage()}"
        if record.exc_info:
            record.exc_text = record.exc_text or self.formatException(record.exc_info)
            text = f"{text}\n{record.exc_text}"
        return text


def _level(value: Optional[str]) -> int:
    level = logging.getLevelName((value or os.environ.get("LOG_LEVEL") or "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """Attach handlers to the ``grandpass`` logger; later calls are no-ops."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if root.handlers:
        return root

    root.setLevel(_level(level))
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    handlers[0].setFormatter(LogFormatter())

    log_file = log_file or os.environ.get("LOG_FILE")
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(LogFormatter(timestamped=True))
        handlers.append(file_handler)

    for handler in handlers:
        root.addHandler(handler)
    root.propagate = False
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    if not name or name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name or ROOT_LOGGER_NAME)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
