"""Example: FastAPI service logging through request contexts.

Every request gets the process logger attached, a ``request_id`` field and,
for 10 % of requests, a logger pinned to ``DEBUG``.  The shared level can be
read and changed at runtime on ``/debug/log``.

Run with::

    pip install 'kvlog[fastapi]' uvicorn
    python docs/examples/webserver.py

Then::

    curl localhost:8080/
    curl localhost:8080/debug/log
    curl -X PUT localhost:8080/debug/log -d '{"level": "debug"}'
"""

from __future__ import annotations

import time
from datetime import timedelta

from kvlog import AtomicLevel, Level, new_production_logger
from kvlog import context as log
from kvlog.adapters.fastapi import (
    LevelRouter,
    LevelSamplingMiddleware,
    LoggerContextMiddleware,
    RequestIdMiddleware,
)

try:
    import uvicorn
    from fastapi import FastAPI, Request
except ImportError as exc:
    raise SystemExit(
        "fastapi/uvicorn are not installed.  Install them with:  pip install 'kvlog[fastapi]' uvicorn"
    ) from exc


def create_app(level: AtomicLevel) -> FastAPI:
    logger = new_production_logger(level)
    log.set_default_logger(logger)

    app = FastAPI()
    app.add_middleware(LevelSamplingMiddleware, percentage=10)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(LoggerContextMiddleware, logger=logger)
    app.include_router(LevelRouter(level))

    @app.get("/")
    async def greet(request: Request) -> dict[str, str]:
        start = time.perf_counter()
        ctx = log.current()
        # mappings are rendered as compact JSON
        log.debug(ctx, "handling request", url=str(request.url), headers=dict(request.headers))
        log.debug(ctx, "request time", elapsed=timedelta(seconds=time.perf_counter() - start))
        return {"message": "Hello World!"}

    return app


if __name__ == "__main__":
    uvicorn.run(create_app(AtomicLevel(Level.ERROR)), host="0.0.0.0", port=8080)
