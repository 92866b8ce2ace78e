"""FastAPI adapter – runtime level control router."""
# No ``from __future__ import annotations`` here: FastAPI resolves endpoint
# annotations against module globals, and ``Request`` is imported lazily.
import json
from typing import Any

from kvlog.errors import UnknownLevelError
from kvlog.level import AtomicLevel


def _require_fastapi() -> None:
    try:
        import fastapi  # noqa: F401
    except ImportError as exc:
        raise ImportError("Install 'kvlog[fastapi]' to use the FastAPI adapter") from exc


def LevelRouter(
    level: AtomicLevel,
    path: str = "/debug/log",
    tags: list[str] | None = None,
) -> Any:
    """Return a router reading and changing *level* at runtime.

    * ``GET {path}`` → ``{"level": "info"}``
    * ``PUT {path}`` with ``{"level": "debug"}`` → ``{"level": "debug"}``

    Malformed bodies and unknown level names get a 400 with
    ``{"error": "<reason>"}``.  The router wraps *level* itself, so changes
    are seen immediately by every logger reading that holder.
    """
    _require_fastapi()
    from fastapi import APIRouter, Request
    from fastapi.responses import JSONResponse

    router = APIRouter(tags=tags or ["ops"])

    @router.get(path)
    async def get_level() -> dict[str, str]:
        return level.to_dict()

    @router.put(path)
    async def put_level(request: Request) -> Any:
        try:
            payload = json.loads(await request.body() or b"null")
        except ValueError as exc:
            return JSONResponse(status_code=400, content={"error": f"malformed request body: {exc}"})
        if not isinstance(payload, dict) or "level" not in payload:
            return JSONResponse(status_code=400, content={"error": "must specify a logging level"})
        try:
            level.set_level(payload["level"])
        except UnknownLevelError as exc:
            return JSONResponse(status_code=400, content={"error": str(exc)})
        return level.to_dict()

    return router


__all__ = ["LevelRouter"]
