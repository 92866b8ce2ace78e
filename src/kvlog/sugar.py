"""kvlog – SugaredLogger.

Looser calling convention over :class:`~kvlog.logger.Logger`: fields are
given as alternating key/value arguments and messages can be assembled
from several operands or a ``%``-style template.  Emission semantics
(levels, panics, fatal exit, output format) are those of the wrapped
logger.

Example::

    slog = logger.sugar()
    slog.infow("cache miss", "key", key, "attempt", 3)
    slog.infof("fetched %d rows in %s", n, elapsed)
    slog.info("done:", n, "rows")
"""
from __future__ import annotations

from typing import Any

from kvlog.level import Level
from kvlog.logger import Logger

_ODD_NUMBER_ERRMSG = "Ignored key without a value."
_NON_STRING_KEY_ERRMSG = "Ignored key-value pairs with non-string keys."


def _sprint(args: tuple[Any, ...]) -> str:
    """Join operands, adding a space only between two non-string operands."""
    out: list[str] = []
    prev_is_str = True
    for i, arg in enumerate(args):
        is_str = isinstance(arg, str)
        if i > 0 and not is_str and not prev_is_str:
            out.append(" ")
        out.append(str(arg))
        prev_is_str = is_str
    return "".join(out)


class SugaredLogger:
    """Alternating key/value front end for a :class:`Logger`."""

    __slots__ = ("_base",)

    def __init__(self, base: Logger) -> None:
        self._base = base

    def desugar(self) -> Logger:
        return self._base

    def named(self, segment: str) -> SugaredLogger:
        return SugaredLogger(self._base.named(segment))

    def with_(self, *keys_and_values: Any) -> SugaredLogger:
        return SugaredLogger(self._base.with_(**self._sweeten(keys_and_values)))

    def level(self) -> Level:
        return self._base.level()

    # ------------------------------------------------------------------
    # Pair handling
    # ------------------------------------------------------------------

    def _sweeten(self, args: tuple[Any, ...]) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        invalid: list[list[Any]] = []
        i = 0
        while i < len(args):
            if i == len(args) - 1:
                self._base.error(_ODD_NUMBER_ERRMSG, ignored=args[i])
                break
            key, value = args[i], args[i + 1]
            if isinstance(key, str):
                fields[key] = value
            else:
                invalid.append([key, value])
            i += 2
        if invalid:
            self._base.dpanic(_NON_STRING_KEY_ERRMSG, invalid=invalid)
        return fields

    def _log(self, level: Level, msg: str, keys_and_values: tuple[Any, ...]) -> None:
        entry = self._base.check(level, msg)
        if entry is None:
            return
        entry.write(**self._sweeten(keys_and_values))

    # ------------------------------------------------------------------
    # Sprint-style
    # ------------------------------------------------------------------

    def debug(self, *args: Any) -> None:
        self._log(Level.DEBUG, _sprint(args), ())

    def info(self, *args: Any) -> None:
        self._log(Level.INFO, _sprint(args), ())

    def warn(self, *args: Any) -> None:
        self._log(Level.WARN, _sprint(args), ())

    def error(self, *args: Any) -> None:
        self._log(Level.ERROR, _sprint(args), ())

    def dpanic(self, *args: Any) -> None:
        self._log(Level.DPANIC, _sprint(args), ())

    def panic(self, *args: Any) -> None:
        self._log(Level.PANIC, _sprint(args), ())

    def fatal(self, *args: Any) -> None:
        self._log(Level.FATAL, _sprint(args), ())

    # ------------------------------------------------------------------
    # Template-style
    # ------------------------------------------------------------------

    def debugf(self, template: str, *args: Any) -> None:
        self._log(Level.DEBUG, template % args if args else template, ())

    def infof(self, template: str, *args: Any) -> None:
        self._log(Level.INFO, template % args if args else template, ())

    def warnf(self, template: str, *args: Any) -> None:
        self._log(Level.WARN, template % args if args else template, ())

    def errorf(self, template: str, *args: Any) -> None:
        self._log(Level.ERROR, template % args if args else template, ())

    def dpanicf(self, template: str, *args: Any) -> None:
        self._log(Level.DPANIC, template % args if args else template, ())

    def panicf(self, template: str, *args: Any) -> None:
        self._log(Level.PANIC, template % args if args else template, ())

    def fatalf(self, template: str, *args: Any) -> None:
        self._log(Level.FATAL, template % args if args else template, ())

    # ------------------------------------------------------------------
    # Key/value-style
    # ------------------------------------------------------------------

    def debugw(self, msg: str, *keys_and_values: Any) -> None:
        self._log(Level.DEBUG, msg, keys_and_values)

    def infow(self, msg: str, *keys_and_values: Any) -> None:
        self._log(Level.INFO, msg, keys_and_values)

    def warnw(self, msg: str, *keys_and_values: Any) -> None:
        self._log(Level.WARN, msg, keys_and_values)

    def errorw(self, msg: str, *keys_and_values: Any) -> None:
        self._log(Level.ERROR, msg, keys_and_values)

    def dpanicw(self, msg: str, *keys_and_values: Any) -> None:
        self._log(Level.DPANIC, msg, keys_and_values)

    def panicw(self, msg: str, *keys_and_values: Any) -> None:
        self._log(Level.PANIC, msg, keys_and_values)

    def fatalw(self, msg: str, *keys_and_values: Any) -> None:
        self._log(Level.FATAL, msg, keys_and_values)

    def __repr__(self) -> str:
        return f"SugaredLogger({self._base!r})"


__all__ = ["SugaredLogger"]
