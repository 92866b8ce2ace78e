"""kvlog – bracketed key-value encoder.

Final processor of the structlog chain.  Turns an event dict into a single
line of the form::

    [ts:2019-04-01T15:39:09.142773Z][level:warn][logger:a.b][caller:pkg/mod.py:97][msg:hello][user:42]

Metadata segments come first in a fixed order, then the structured fields
(the mapping under ``FIELDS``) in the order they were bound / passed, then
the optional stack trace.
"""
from __future__ import annotations

import dataclasses
import enum
import json
import math
from collections.abc import Callable, Mapping
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from pathlib import PurePath
from typing import Any

from kvlog.level import Level

RFC3339_MICRO = "%Y-%m-%dT%H:%M:%S.%fZ"

# event-dict keys written by the processor chain (see kvlog.logger)
TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER_NAME = "logger"
PATHNAME = "pathname"
LINENO = "lineno"
EVENT = "event"
STACK = "stack"
# user fields (bound + call-site) travel nested under this key, apart from the
# metadata above, so any field name renders as an ordinary segment
FIELDS = "fields"


# ---------------------------------------------------------------------------
# Pluggable element encoders
# ---------------------------------------------------------------------------


def lowercase_level(level: Level) -> str:
    return level.name.lower()


def capital_level(level: Level) -> str:
    return level.name


def seconds_duration(value: timedelta) -> str:
    return format_float(value.total_seconds())


def millis_duration(value: timedelta) -> str:
    return format_float(value / timedelta(milliseconds=1))


def nanos_duration(value: timedelta) -> str:
    return str(value // timedelta(microseconds=1) * 1000)


def string_duration(value: timedelta) -> str:
    return str(value)


def short_caller(pathname: str, lineno: int) -> str:
    """``/src/app/handlers/user.py`` line 12 → ``handlers/user.py:12``."""
    path = PurePath(pathname)
    if path.parent.name:
        return f"{path.parent.name}/{path.name}:{lineno}"
    return f"{path.name}:{lineno}"


def full_caller(pathname: str, lineno: int) -> str:
    return f"{pathname}:{lineno}"


def format_float(value: float) -> str:
    """Shortest round-trip positional form: ``1234.5678``, ``1``, ``NaN``, ``+Inf``."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class EncoderConfig:
    """Segment keys and element encoders.

    An empty key drops the corresponding metadata segment entirely.
    ``time_format`` is used for the record timestamp and for ``datetime``
    field values alike.
    """

    time_key: str = "ts"
    level_key: str = "level"
    name_key: str = "logger"
    caller_key: str = "caller"
    message_key: str = "msg"
    stacktrace_key: str = "stacktrace"
    time_format: str = RFC3339_MICRO
    encode_level: Callable[[Level], str] = lowercase_level
    encode_duration: Callable[[timedelta], str] = seconds_duration
    encode_caller: Callable[[str, int], str] = short_caller


# ---------------------------------------------------------------------------
# Encoder
# ---------------------------------------------------------------------------


class KeyValueEncoder:
    """structlog processor rendering an event dict as one bracketed line.

    Must be the last processor: it returns a ``str`` that structlog hands to
    the sink's ``msg`` method.
    """

    def __init__(self, config: EncoderConfig | None = None) -> None:
        self._config = config or EncoderConfig()

    @property
    def config(self) -> EncoderConfig:
        return self._config

    def __call__(self, logger: Any, method_name: str, event_dict: dict[str, Any]) -> str:  # noqa: ARG002
        cfg = self._config
        parts: list[str] = []

        timestamp = event_dict.get(TIMESTAMP)
        if cfg.time_key and timestamp is not None:
            parts.append(self._segment(cfg.time_key, self.encode_value(timestamp)))

        level = event_dict.get(LEVEL)
        if cfg.level_key and level is not None:
            rendered = cfg.encode_level(level) if isinstance(level, Level) else str(level)
            parts.append(self._segment(cfg.level_key, rendered))

        name = event_dict.get(LOGGER_NAME)
        if cfg.name_key and name:
            parts.append(self._segment(cfg.name_key, _escape(str(name))))

        pathname = event_dict.get(PATHNAME)
        if cfg.caller_key and pathname:
            caller = cfg.encode_caller(pathname, event_dict.get(LINENO, 0))
            parts.append(self._segment(cfg.caller_key, _escape(caller)))

        if cfg.message_key:
            parts.append(self._segment(cfg.message_key, _escape(str(event_dict.get(EVENT, "")))))

        for key, value in event_dict.get(FIELDS, {}).items():
            parts.append(self._segment(_escape(str(key)), self.encode_value(value)))

        stack = event_dict.get(STACK)
        if cfg.stacktrace_key and stack:
            parts.append(self._segment(cfg.stacktrace_key, str(stack).rstrip("\n")))

        return "".join(parts)

    def encode_value(self, value: Any) -> str:  # noqa: PLR0911
        """Render one field value; never contains a raw newline."""
        cfg = self._config
        if isinstance(value, str):
            return _escape(value)
        if isinstance(value, Level):
            return str(value)
        if isinstance(value, enum.Enum):
            return _escape(value.name)
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, int):
            return str(int(value))
        if isinstance(value, float):
            return format_float(value)
        if isinstance(value, datetime):
            return value.astimezone(UTC).strftime(cfg.time_format)
        if isinstance(value, timedelta):
            return cfg.encode_duration(value)
        if isinstance(value, BaseException):
            return _escape(str(value))
        if isinstance(value, (bytes, bytearray)):
            return _escape(bytes(value).decode("utf-8", errors="replace"))
        if isinstance(value, Decimal):
            return str(value)
        if isinstance(value, (Mapping, list, tuple, set, frozenset)):
            return _escape(_dump(value))
        return _escape(str(value))

    @staticmethod
    def _segment(key: str, value: str) -> str:
        return f"[{key}:{value}]"


def _escape(text: str) -> str:
    if "\n" in text or "\r" in text:
        return text.replace("\r", "\\r").replace("\n", "\\n")
    return text


def _dump(value: Any) -> str:
    """Compact JSON; ``repr`` for structures JSON cannot hold (non-string keys, cycles)."""
    if isinstance(value, (set, frozenset)):
        value = sorted(value, key=str)
    try:
        return json.dumps(value, ensure_ascii=False, default=str, separators=(",", ":"))
    except (TypeError, ValueError):
        return repr(value)


__all__ = [
    "RFC3339_MICRO",
    "EncoderConfig",
    "KeyValueEncoder",
    "capital_level",
    "format_float",
    "full_caller",
    "lowercase_level",
    "millis_duration",
    "nanos_duration",
    "seconds_duration",
    "short_caller",
    "string_duration",
]
