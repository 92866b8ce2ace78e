"""kvlog – Logger facade on top of structlog.

:class:`Logger` is a custom structlog wrapper class: it carries the bound
fields and the processor chain like any ``BoundLoggerBase``, plus a dotted
name and a :class:`~kvlog.core.LevelCore` deciding which records are
emitted.  All derivations (``named``, ``with_``, ``with_level``,
``with_options``) return new loggers; nothing is ever mutated in place.

Quick start::

    lvl = AtomicLevel(Level.INFO)
    log = new_production_logger(lvl)
    log.named("http").with_(request_id="abc").info("served", status=200)
    # [ts:...][level:info][logger:http][caller:app/main.py:12][msg:served][request_id:abc][status:200]
"""
from __future__ import annotations

import enum
import logging
import sys
from collections.abc import Callable, Iterable
from typing import IO, TYPE_CHECKING, Any

import structlog
from structlog.processors import CallsiteParameter

from kvlog.core import NEVER, LevelCore
from kvlog.encoder import EVENT, FIELDS, LEVEL, LOGGER_NAME, TIMESTAMP, EncoderConfig, KeyValueEncoder
from kvlog.errors import PanicError
from kvlog.level import AtomicLevel, Level, LevelLike

if TYPE_CHECKING:
    from kvlog.sugar import SugaredLogger

_internal = logging.getLogger("kvlog")

# Module prefixes skipped when locating the caller / capturing the stack.
IGNORED_FRAMES = ["kvlog."]

FatalHook = Callable[[int], Any]
Option = Callable[["Logger"], None]


class CheckWriteAction(enum.Enum):
    """What happens after a checked entry has been written."""

    NOOP = "noop"
    PANIC = "panic"
    FATAL = "fatal"


class CheckedEntry:
    """Deferred write handle returned by :meth:`Logger.check`.

    Fields are only materialised when :meth:`write` is called, so a disabled
    level costs one threshold read and nothing else.
    """

    __slots__ = ("_action", "_logger", "_should_write", "level", "message")

    def __init__(
        self,
        logger: Logger,
        level: Level,
        message: str,
        should_write: bool,
        action: CheckWriteAction = CheckWriteAction.NOOP,
    ) -> None:
        self._logger = logger
        self._should_write = should_write
        self._action = action
        self.level = level
        self.message = message

    @property
    def action(self) -> CheckWriteAction:
        return self._action

    def write(self, **fields: Any) -> None:
        """Emit the entry with *fields*, then run the terminal action, if any."""
        if self._should_write:
            self._logger._write(self.level, self.message, fields)
        if self._action is CheckWriteAction.PANIC:
            raise PanicError(self.message, self.level)
        if self._action is CheckWriteAction.FATAL:
            self._logger._fatal_hook(1)


class AddStacktrace:
    """Request a stack trace (rendered by ``StackInfoRenderer``) at or above *level*."""

    def __init__(self, level: Level) -> None:
        self._level = level

    def __call__(self, logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:  # noqa: ARG002
        level = event_dict.get(LEVEL)
        if isinstance(level, Level) and level >= self._level:
            event_dict["stack_info"] = True
        return event_dict


class Logger(structlog.BoundLoggerBase):
    """Leveled, structured logger whose threshold can change at runtime.

    Fields are keyword arguments; the message is positional-only so any
    key (including ``msg``) can be used as a field name.  All methods are
    safe for concurrent use.
    """

    def __init__(
        self,
        logger: Any,
        processors: Iterable[Any],
        context: dict[str, Any],
        *,
        name: str = "",
        core: LevelCore | None = None,
        development: bool = False,
        fatal_hook: FatalHook = sys.exit,
    ) -> None:
        super().__init__(logger, processors, context)
        self._name = name
        self._core = core if core is not None else LevelCore(AtomicLevel(Level.DEBUG))
        self._development = development
        self._fatal_hook = fatal_hook

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def core(self) -> LevelCore:
        return self._core

    @property
    def development(self) -> bool:
        return self._development

    def level(self) -> Level:
        """Current threshold of the holder this logger is bound to."""
        return self._core.level.level()

    def enabled(self, level: LevelLike) -> bool:
        return self._core.enabled(Level.parse(level))

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def _clone(self, **changes: Any) -> Logger:
        params: dict[str, Any] = {
            "logger": self._logger,
            "processors": self._processors,
            "context": self._context,
            "name": self._name,
            "core": self._core,
            "development": self._development,
            "fatal_hook": self._fatal_hook,
        }
        params.update(changes)
        return self.__class__(**params)

    def named(self, segment: str) -> Logger:
        """Append *segment* to the dotted name.  An empty segment is a no-op."""
        if not segment:
            return self
        name = segment if not self._name else f"{self._name}.{segment}"
        return self._clone(name=name)

    def with_(self, **fields: Any) -> Logger:
        """Child logger with *fields* appended to the accumulated ones.

        The child shares this logger's level holder, so a change to a shared
        :class:`AtomicLevel` keeps propagating to it.
        """
        if not fields:
            return self
        return self._clone(context=self._context.__class__(self._context, **fields))

    def bind(self, **new_values: Any) -> Logger:
        return self.with_(**new_values)

    def new(self, **new_values: Any) -> Logger:
        return self._clone(context=self._context.__class__(**new_values))

    def unbind(self, *keys: str) -> Logger:
        """Child logger without *keys*; raises ``KeyError`` for an unbound key."""
        context = self._context.copy()
        for key in keys:
            del context[key]
        return self._clone(context=context)

    def try_unbind(self, *keys: str) -> Logger:
        context = self._context.copy()
        for key in keys:
            context.pop(key, None)
        return self._clone(context=context)

    def with_level(self, level: LevelLike) -> Logger:
        """Child logger pinned to *level* through a private holder.

        The child keeps all fields and the name, but never again follows
        the parent's holder.
        """
        return self.with_options(wrap_core_with_level(AtomicLevel(level)))

    def with_options(self, *options: Option) -> Logger:
        clone = self._clone()
        for option in options:
            option(clone)
        return clone

    def sugar(self) -> SugaredLogger:
        from kvlog.sugar import SugaredLogger

        return SugaredLogger(self)

    # ------------------------------------------------------------------
    # Emitting
    # ------------------------------------------------------------------

    def check(self, level: LevelLike, msg: str) -> CheckedEntry | None:
        """Return a write handle if *level* is enabled.

        ``PANIC`` and ``FATAL`` always get a handle (the terminal action runs
        even when the record itself is filtered out); ``DPANIC`` does in
        development mode.
        """
        level = Level.parse(level)
        should_write = self._core.enabled(level)
        action = self._terminal_action(level)
        if not should_write and action is CheckWriteAction.NOOP:
            return None
        return CheckedEntry(self, level, msg, should_write, action)

    def debug(self, msg: str, /, **fields: Any) -> None:
        self._log(Level.DEBUG, msg, fields)

    def info(self, msg: str, /, **fields: Any) -> None:
        self._log(Level.INFO, msg, fields)

    def warn(self, msg: str, /, **fields: Any) -> None:
        self._log(Level.WARN, msg, fields)

    warning = warn

    def error(self, msg: str, /, **fields: Any) -> None:
        self._log(Level.ERROR, msg, fields)

    def dpanic(self, msg: str, /, **fields: Any) -> None:
        """Log at ``DPANIC``; in development mode, then raise :class:`PanicError`."""
        self._log(Level.DPANIC, msg, fields)

    def panic(self, msg: str, /, **fields: Any) -> None:
        """Log at ``PANIC``, then raise :class:`PanicError` even if the level is disabled."""
        self._log(Level.PANIC, msg, fields)

    def fatal(self, msg: str, /, **fields: Any) -> None:
        """Log at ``FATAL``, then call the fatal hook (``sys.exit(1)``) even if disabled."""
        self._log(Level.FATAL, msg, fields)

    def _log(self, level: Level, msg: str, fields: dict[str, Any]) -> None:
        entry = self.check(level, msg)
        if entry is not None:
            entry.write(**fields)

    def _terminal_action(self, level: Level) -> CheckWriteAction:
        if level == Level.FATAL:
            return CheckWriteAction.FATAL
        if level == Level.PANIC or (level == Level.DPANIC and self._development):
            return CheckWriteAction.PANIC
        return CheckWriteAction.NOOP

    def _write(self, level: Level, msg: str, fields: dict[str, Any]) -> None:
        # Only metadata lives at the top level of the event dict; the fields
        # are nested so they can never clash with processor keys.
        event: Any = {FIELDS: {**self._context, **fields}, LEVEL: level, EVENT: msg}
        if self._name:
            event[LOGGER_NAME] = self._name
        try:
            for processor in self._processors:
                event = processor(self._logger, "msg", event)
        except structlog.DropEvent:
            return
        try:
            self._logger.msg(event)
        except (OSError, ValueError) as exc:
            _internal.warning("kvlog: failed to write %s record %r: %s", level, msg, exc)

    def __repr__(self) -> str:
        return (
            f"<Logger(name={self._name!r}, level={self.level()!s}, "
            f"context={self._context!r})>"
        )


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


def wrap_core_with_level(level: AtomicLevel) -> Option:
    """Bind the logger's core to *level* instead of its current holder."""

    def apply(logger: Logger) -> None:
        logger._core = logger._core.with_level(level)

    return apply


def development() -> Option:
    """Make ``dpanic`` raise after writing."""

    def apply(logger: Logger) -> None:
        logger._development = True

    return apply


def on_fatal(hook: FatalHook) -> Option:
    """Replace the action run after a ``fatal`` record (default ``sys.exit``)."""

    def apply(logger: Logger) -> None:
        logger._fatal_hook = hook

    return apply


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------


def build_processors(
    encoder: KeyValueEncoder,
    stacktrace_level: Level = Level.ERROR,
) -> list[Any]:
    """structlog chain: timestamp → caller → stack trace → key-value line."""
    return [
        structlog.processors.TimeStamper(fmt=encoder.config.time_format, utc=True, key=TIMESTAMP),
        structlog.processors.CallsiteParameterAdder(
            parameters={CallsiteParameter.PATHNAME, CallsiteParameter.LINENO},
            additional_ignores=IGNORED_FRAMES,
        ),
        AddStacktrace(stacktrace_level),
        structlog.processors.StackInfoRenderer(additional_ignores=IGNORED_FRAMES),
        encoder,
    ]


def new_production_logger(
    level: AtomicLevel,
    *,
    output: IO[str] | None = None,
    development: bool = False,
    stacktrace_level: LevelLike = Level.ERROR,
    encoder_config: EncoderConfig | None = None,
) -> Logger:
    """Key-value logger writing to *output* (default ``sys.stderr``).

    Records are enabled at *level* and above; *level* is read on every call,
    so it can be adjusted at runtime through :meth:`AtomicLevel.set_level`.
    Stack traces are attached at *stacktrace_level* and above.
    """
    encoder = KeyValueEncoder(encoder_config)
    return Logger(
        structlog.WriteLogger(output if output is not None else sys.stderr),
        build_processors(encoder, Level.parse(stacktrace_level)),
        {},
        core=LevelCore(level, Level.DEBUG),
        development=development,
    )


def new_development_logger(
    level: AtomicLevel | None = None,
    *,
    output: IO[str] | None = None,
) -> Logger:
    """Development flavour: ``DEBUG`` by default, stack traces from ``WARN``, ``dpanic`` raises."""
    return new_production_logger(
        level if level is not None else AtomicLevel(Level.DEBUG),
        output=output,
        development=True,
        stacktrace_level=Level.WARN,
    )


def new_nop() -> Logger:
    """Logger that never writes anything.

    ``panic`` and ``fatal`` keep their terminal behaviour.
    """
    return Logger(
        structlog.ReturnLogger(),
        [],
        {},
        core=LevelCore(AtomicLevel(Level.DEBUG), NEVER),
    )


__all__ = [
    "IGNORED_FRAMES",
    "AddStacktrace",
    "CheckWriteAction",
    "CheckedEntry",
    "Logger",
    "Option",
    "build_processors",
    "development",
    "new_development_logger",
    "new_nop",
    "new_production_logger",
    "on_fatal",
    "wrap_core_with_level",
]
