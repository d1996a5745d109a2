"""Logging setup for the runner.

All log output goes to stderr through loguru; stdout only ever carries the
response envelope. psycopg logs through stdlib ``logging``, so the root
logger is pointed at loguru too.
"""

from __future__ import annotations

import logging
import sys

from loguru import logger

from query_runner.config import Settings

_TEXT_FORMAT = "{time:HH:mm:ss.SSS} {level: <8} {name}:{line} | {message}"


class InterceptHandler(logging.Handler):
    """Forward stdlib records to loguru, keeping the original call site."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(settings: Settings, *, level: str | None = None, json: bool = False) -> None:
    """Install the single stderr sink.

    ``level`` and ``json`` come from the command line and take precedence over
    ``settings.log_level`` and ``settings.log_json``.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or settings.log_level).upper(),
        format=_TEXT_FORMAT,
        serialize=json or settings.log_json,
    )
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
