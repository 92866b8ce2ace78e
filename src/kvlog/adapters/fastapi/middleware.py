"""FastAPI adapter – ASGI middleware propagating the request logger.

Each middleware reads the request's :class:`~kvlog.context.Context` from
:func:`kvlog.context.current`, derives a new one and publishes it for the
rest of the request.  Handlers then log with ``log.info(current(), ...)``.

Typical stack; the last middleware added runs first::

    app.add_middleware(LevelSamplingMiddleware, percentage=10)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(LoggerContextMiddleware, logger=logger)
"""
from __future__ import annotations

import abc
import random
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from kvlog import context as log_ctx
from kvlog.level import Level, LevelLike
from kvlog.logger import Logger

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Receive, Scope, Send


def _require_fastapi() -> None:
    try:
        import fastapi  # noqa: F401
    except ImportError as exc:
        raise ImportError("Install 'kvlog[fastapi]' to use the FastAPI adapter") from exc


class _ContextMiddleware(abc.ABC):
    """Derive a context for each HTTP/websocket request and publish it."""

    def __init__(self, app: ASGIApp) -> None:
        _require_fastapi()
        self.app = app

    @abc.abstractmethod
    def derive(self, ctx: log_ctx.Context, scope: Scope) -> log_ctx.Context: ...

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        with log_ctx.scoped(self.derive(log_ctx.current(), scope)):
            await self.app(scope, receive, send)


class LoggerContextMiddleware(_ContextMiddleware):
    """Attach *logger* to a fresh context for every request."""

    def __init__(self, app: ASGIApp, logger: Logger) -> None:
        super().__init__(app)
        self._logger = logger

    def derive(self, ctx: log_ctx.Context, scope: Scope) -> log_ctx.Context:  # noqa: ARG002
        return log_ctx.attach(log_ctx.background(), self._logger)


class RequestIdMiddleware(_ContextMiddleware):
    """Add a ``request_id`` field taken from *header_name* or generated (UUID4)."""

    def __init__(
        self,
        app: ASGIApp,
        header_name: str = "X-Request-ID",
        field_name: str = "request_id",
    ) -> None:
        super().__init__(app)
        self._header = header_name.lower().encode()
        self._field = field_name

    def derive(self, ctx: log_ctx.Context, scope: Scope) -> log_ctx.Context:
        from uuid import uuid4

        headers = dict(scope.get("headers", []))
        request_id = headers.get(self._header, b"").decode().strip() or str(uuid4())
        return log_ctx.with_(ctx, **{self._field: request_id})


class LevelSamplingMiddleware(_ContextMiddleware):
    """Lower the level of a random share of requests.

    For *percentage* percent of requests the request logger is replaced by a
    child pinned to *level*; other requests keep the shared threshold.

    Parameters
    ----------
    percentage:
        0–100.
    level:
        Level the sampled requests log at (default ``DEBUG``).
    rand:
        Source of uniform floats in ``[0, 100)``; injectable for tests.
    """

    def __init__(
        self,
        app: ASGIApp,
        percentage: float,
        level: LevelLike = Level.DEBUG,
        rand: Callable[[], float] | None = None,
    ) -> None:
        super().__init__(app)
        self._percentage = percentage
        self._level = Level.parse(level)
        self._rand = rand or (lambda: random.uniform(0, 100))

    def derive(self, ctx: log_ctx.Context, scope: Any) -> log_ctx.Context:  # noqa: ARG002
        if self._rand() < self._percentage:
            return log_ctx.with_level(ctx, self._level)
        return ctx


__all__ = ["LevelSamplingMiddleware", "LoggerContextMiddleware", "RequestIdMiddleware"]
