"""kvlog – level-aware emit decision.

The wrapped engine's own filtering (structlog's filtering bound loggers)
bakes the threshold in when the logger is built.  :class:`LevelCore` instead
reads it from an :class:`~kvlog.level.AtomicLevel` every time a record is
considered, on top of a fixed *base* decision.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from kvlog.level import AtomicLevel, Level


@runtime_checkable
class LevelEnabler(Protocol):
    """Anything that can answer "is this level enabled?"."""

    def enabled(self, level: Level) -> bool: ...


class _Never:
    def enabled(self, level: Level) -> bool:  # noqa: ARG002
        return False

    def __repr__(self) -> str:
        return "NEVER"


NEVER: LevelEnabler = _Never()


class LevelCore:
    """Emit decision bound to a mutable threshold.

    Parameters
    ----------
    level:
        Holder consulted on every decision.
    base:
        Fixed decision of the underlying pipeline.  Defaults to
        ``Level.DEBUG`` (everything passes); :data:`NEVER` gives a core that
        discards all records.
    """

    __slots__ = ("_base", "_level")

    def __init__(self, level: AtomicLevel, base: LevelEnabler = Level.DEBUG) -> None:
        self._level = level
        self._base = base

    @property
    def level(self) -> AtomicLevel:
        return self._level

    def enabled(self, level: Level) -> bool:
        return self._base.enabled(level) and self._level.enabled(level)

    def with_level(self, level: AtomicLevel) -> LevelCore:
        """Return a copy with the same base, bound to a different holder."""
        return LevelCore(level, self._base)

    def __repr__(self) -> str:
        return f"LevelCore(level={self._level!r}, base={self._base!r})"


__all__ = ["NEVER", "LevelCore", "LevelEnabler"]
