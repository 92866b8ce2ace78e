"""
kvlog – key-value structured logging on top of structlog.

Import path convention::

    from kvlog import AtomicLevel, Level, new_production_logger
    from kvlog import context as log
    from kvlog.adapters.fastapi import LevelRouter
"""
from kvlog.core import LevelCore
from kvlog.encoder import EncoderConfig, KeyValueEncoder
from kvlog.errors import KvlogError, PanicError, UnknownLevelError
from kvlog.level import AtomicLevel, Level
from kvlog.logger import (
    CheckedEntry,
    Logger,
    new_development_logger,
    new_nop,
    new_production_logger,
)
from kvlog.sugar import SugaredLogger

__version__ = "0.1.0"
__all__ = [
    "AtomicLevel",
    "CheckedEntry",
    "EncoderConfig",
    "KeyValueEncoder",
    "KvlogError",
    "Level",
    "LevelCore",
    "Logger",
    "PanicError",
    "SugaredLogger",
    "UnknownLevelError",
    "__version__",
    "new_development_logger",
    "new_nop",
    "new_production_logger",
]
