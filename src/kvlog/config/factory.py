"""Config – build the process logger from settings."""
from __future__ import annotations

import sys

from kvlog.config.settings import LoggerSettings
from kvlog.level import AtomicLevel, Level
from kvlog.logger import Logger, new_production_logger


def build_logger(settings: LoggerSettings) -> tuple[Logger, AtomicLevel]:
    """Return the configured logger and the shared holder it reads.

    Keep the holder: it is what an administrative endpoint (see
    :func:`kvlog.adapters.fastapi.LevelRouter`) must wrap to change the
    level of every non-frozen logger at runtime.
    """
    level = AtomicLevel(Level.parse(settings.level))
    output = sys.stdout if settings.output == "stdout" else sys.stderr
    logger = new_production_logger(
        level,
        output=output,
        development=settings.development,
        stacktrace_level=settings.stacktrace_level,
    )
    return logger, level


__all__ = ["build_logger"]
