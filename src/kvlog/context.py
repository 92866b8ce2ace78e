"""kvlog – logger propagation through immutable context values.

A :class:`Context` is an immutable chain of key/value links.  The active
logger lives under a private key; every helper that changes logging state
returns a *new* context layered on the one it was given::

    ctx = attach(background(), logger)
    ctx = with_(ctx, request_id=rid)
    ctx = named(ctx, "billing")
    info(ctx, "charged", amount=12.5)

A context that never had a logger attached resolves to the process-wide
default logger, which discards everything until replaced with
:func:`set_default_logger`.

Frameworks that cannot thread a context value through their call chain
(ASGI handlers, for instance) can publish one for the current task with
:func:`activate` / :func:`scoped` and read it back with :func:`current`.
"""
from __future__ import annotations

import dataclasses
import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Any

from kvlog.level import LevelLike
from kvlog.logger import CheckedEntry, Logger, new_nop
from kvlog.sugar import SugaredLogger


@dataclasses.dataclass(frozen=True, eq=False, repr=False)
class Context:
    """Immutable key/value chain.  Lookups walk from the newest link back."""

    parent: Context | None = None
    key: Hashable | None = None
    val: Any = None

    def with_value(self, key: Hashable, val: Any) -> Context:
        return Context(parent=self, key=key, val=val)

    def value(self, key: Hashable) -> Any:
        node: Context | None = self
        while node is not None:
            if node.parent is not None and node.key == key:
                return node.val
            node = node.parent
        return None

    def __repr__(self) -> str:
        depth = 0
        node = self
        while node.parent is not None:
            depth += 1
            node = node.parent
        return f"Context(depth={depth})"


_BACKGROUND = Context()


class _LoggerKey:
    def __repr__(self) -> str:
        return "kvlog.logger"


_LOGGER_KEY = _LoggerKey()


def background() -> Context:
    """The empty root context."""
    return _BACKGROUND


# ---------------------------------------------------------------------------
# Default logger
# ---------------------------------------------------------------------------

_default_lock = threading.Lock()
_default_logger: Logger = new_nop()


def default_logger() -> Logger:
    with _default_lock:
        return _default_logger


def set_default_logger(logger: Logger) -> None:
    """Replace the fallback used for contexts without an attached logger.

    Meant to be called once during start-up, before requests are served.
    """
    global _default_logger
    with _default_lock:
        _default_logger = logger


def from_context(ctx: Context) -> Logger:
    """Logger attached to *ctx*, or the default logger.  Never fails."""
    logger = ctx.value(_LOGGER_KEY)
    if logger is None:
        return default_logger()
    return logger


# ---------------------------------------------------------------------------
# Derivation – each returns a new context
# ---------------------------------------------------------------------------


def attach(ctx: Context, logger: Logger) -> Context:
    """Return a child of *ctx* whose active logger is *logger*."""
    return ctx.with_value(_LOGGER_KEY, logger)


def named(ctx: Context, segment: str) -> Context:
    return attach(ctx, from_context(ctx).named(segment))


def with_(ctx: Context, **fields: Any) -> Context:
    return attach(ctx, from_context(ctx).with_(**fields))


def with_level(ctx: Context, level: LevelLike) -> Context:
    """Return a context whose logger is pinned to *level*.

    Earlier contexts keep their own logger and threshold.
    """
    return attach(ctx, from_context(ctx).with_level(level))


# ---------------------------------------------------------------------------
# Emitting – delegate to the active logger
# ---------------------------------------------------------------------------


def sugar(ctx: Context) -> SugaredLogger:
    return from_context(ctx).sugar()


def check(ctx: Context, level: LevelLike, msg: str) -> CheckedEntry | None:
    return from_context(ctx).check(level, msg)


def debug(ctx: Context, msg: str, /, **fields: Any) -> None:
    from_context(ctx).debug(msg, **fields)


def info(ctx: Context, msg: str, /, **fields: Any) -> None:
    from_context(ctx).info(msg, **fields)


def warn(ctx: Context, msg: str, /, **fields: Any) -> None:
    from_context(ctx).warn(msg, **fields)


def error(ctx: Context, msg: str, /, **fields: Any) -> None:
    from_context(ctx).error(msg, **fields)


def dpanic(ctx: Context, msg: str, /, **fields: Any) -> None:
    """Log at ``DPANIC``; raises :class:`~kvlog.errors.PanicError` in development mode."""
    from_context(ctx).dpanic(msg, **fields)


def panic(ctx: Context, msg: str, /, **fields: Any) -> None:
    """Log at ``PANIC``, then raise :class:`~kvlog.errors.PanicError`."""
    from_context(ctx).panic(msg, **fields)


def fatal(ctx: Context, msg: str, /, **fields: Any) -> None:
    """Log at ``FATAL``, then exit the process."""
    from_context(ctx).fatal(msg, **fields)


# ---------------------------------------------------------------------------
# Task-local bridge
# ---------------------------------------------------------------------------

_CTX_VAR: ContextVar[Context] = ContextVar("_kvlog_ctx", default=_BACKGROUND)


def current() -> Context:
    """Context published for the running task/thread, or :func:`background`."""
    return _CTX_VAR.get()


def activate(ctx: Context) -> Token[Context]:
    return _CTX_VAR.set(ctx)


def deactivate(token: Token[Context]) -> None:
    _CTX_VAR.reset(token)


@contextmanager
def scoped(ctx: Context) -> Iterator[Context]:
    """Publish *ctx* as :func:`current` for the duration of the block."""
    token = _CTX_VAR.set(ctx)
    try:
        yield ctx
    finally:
        _CTX_VAR.reset(token)


__all__ = [
    "Context",
    "activate",
    "attach",
    "background",
    "check",
    "current",
    "deactivate",
    "debug",
    "default_logger",
    "dpanic",
    "error",
    "fatal",
    "from_context",
    "info",
    "named",
    "panic",
    "scoped",
    "set_default_logger",
    "sugar",
    "warn",
    "with_",
    "with_level",
]
