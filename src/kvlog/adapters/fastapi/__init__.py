"""FastAPI adapter – level control router and logger-propagating middleware."""
from kvlog.adapters.fastapi.middleware import (
    LevelSamplingMiddleware,
    LoggerContextMiddleware,
    RequestIdMiddleware,
)
from kvlog.adapters.fastapi.routers import LevelRouter

__all__ = [
    "LevelRouter",
    "LevelSamplingMiddleware",
    "LoggerContextMiddleware",
    "RequestIdMiddleware",
]
