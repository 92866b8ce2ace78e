"""kvlog – severity levels and the shared mutable level holder."""
from __future__ import annotations

import threading
from enum import IntEnum
from typing import Union

from kvlog.errors import UnknownLevelError


class Level(IntEnum):
    """Totally ordered severity.  Numeric values match the wrapped engine's."""

    DEBUG = -1
    INFO = 0
    WARN = 1
    ERROR = 2
    DPANIC = 3
    PANIC = 4
    FATAL = 5

    def __str__(self) -> str:
        return self.name.lower()

    def enabled(self, level: Level) -> bool:
        """Return ``True`` if *level* is at or above this threshold."""
        return level >= self

    @classmethod
    def parse(cls, value: LevelLike) -> Level:
        """Coerce a :class:`Level`, its integer value or its (case-insensitive) name.

        Raises
        ------
        UnknownLevelError
            When *value* names no level.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip().lower()
            level = _NAMES.get(text)
            if level is None:
                raise UnknownLevelError(value)
            return level
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                raise UnknownLevelError(value) from None
        raise UnknownLevelError(value)


LevelLike = Union[Level, int, str]

_NAMES: dict[str, Level] = {str(lvl): lvl for lvl in Level}
_NAMES["warning"] = Level.WARN


class AtomicLevel:
    """Thread-safe holder of one :class:`Level`, shared by reference.

    Every logger built on top of an ``AtomicLevel`` reads it on each emit
    decision, so :meth:`set_level` takes effect immediately for all of them.
    Loggers derived with ``with_level`` get their own private holder and stop
    tracking this one.

    Example::

        lvl = AtomicLevel(Level.ERROR)
        logger = new_production_logger(lvl)
        lvl.set_level("debug")   # logger now emits debug records
    """

    __slots__ = ("_level", "_lock")

    def __init__(self, level: LevelLike = Level.INFO) -> None:
        self._lock = threading.Lock()
        self._level = Level.parse(level)

    def level(self) -> Level:
        with self._lock:
            return self._level

    def set_level(self, level: LevelLike) -> None:
        parsed = Level.parse(level)
        with self._lock:
            self._level = parsed

    def enabled(self, level: Level) -> bool:
        return self.level().enabled(level)

    def to_dict(self) -> dict[str, str]:
        """Wire form used by the administrative endpoint."""
        return {"level": str(self.level())}

    def __str__(self) -> str:
        return str(self.level())

    def __repr__(self) -> str:
        return f"AtomicLevel({self.level()!s})"


__all__ = ["AtomicLevel", "Level", "LevelLike"]
