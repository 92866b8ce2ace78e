"""Config – Settings base class and LoggerSettings."""
from __future__ import annotations

import dataclasses
from typing import ClassVar

from kvlog.errors import InvalidSettingValueError, UnknownLevelError
from kvlog.level import Level

OUTPUTS = ("stderr", "stdout")


@dataclasses.dataclass
class Settings:
    """Base class for 12-factor settings."""

    _prefix: ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""


@dataclasses.dataclass
class LoggerSettings(Settings):
    """Process logger configuration, read from ``LOG_*`` variables.

    ``level`` is only the *initial* threshold; it can be changed at runtime
    through the :class:`~kvlog.level.AtomicLevel` returned by
    :func:`~kvlog.config.build_logger`.
    """

    _prefix: ClassVar[str] = "LOG"

    level: str = "info"
    development: bool = False
    stacktrace_level: str = "error"
    output: str = "stderr"

    def _validate(self) -> None:
        for name in ("level", "stacktrace_level"):
            value = getattr(self, name)
            try:
                Level.parse(value)
            except UnknownLevelError as exc:
                raise InvalidSettingValueError(name, value, "unknown level") from exc
        if self.output not in OUTPUTS:
            raise InvalidSettingValueError("output", self.output, f"expected one of {OUTPUTS}")


__all__ = ["LoggerSettings", "Settings"]
