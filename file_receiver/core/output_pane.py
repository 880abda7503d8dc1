"""Diagnostic output channel.

Every request, resolution step and error is written here as a timestamped
line. It is the only operational visibility the service has.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

PANE_NAME = "File Receiver Bridge"
ROOT_LOGGER = "file_receiver"
LINE_FORMAT = "[%(asctime)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class PreflightFilter(logging.Filter):
    """Drop uvicorn access lines for CORS preflight requests."""

    def filter(self, record: logging.LogRecord) -> bool:
        return '"OPTIONS ' not in record.getMessage()


class PaneStreamHandler(logging.StreamHandler):
    pass


class PaneFileHandler(logging.FileHandler):
    pass


def _has_pane_handler(logger: logging.Logger, handler_type: type) -> bool:
    return any(isinstance(h, handler_type) for h in logger.handlers)


def create_output_pane(
    log_file: Optional[Path] = None,
    level: str = "INFO",
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Attach the output pane handlers to the package logger.

    Safe to call more than once; handlers are only added the first time.
    """

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))
    formatter = logging.Formatter(LINE_FORMAT, datefmt=DATE_FORMAT)

    if not _has_pane_handler(logger, PaneStreamHandler):
        stream_handler = PaneStreamHandler(stream or sys.stderr)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    if log_file is not None and not _has_pane_handler(logger, PaneFileHandler):
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = PaneFileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    access_logger = logging.getLogger("uvicorn.access")
    if not any(isinstance(f, PreflightFilter) for f in access_logger.filters):
        access_logger.addFilter(PreflightFilter())

    logger.info("Output pane '%s' ready", PANE_NAME)
    return logger
