"""kvlog – error hierarchy.

Derivation and emit operations never raise these for ordinary use; they
surface only from parsing entry points (levels, settings) and from the
intentional ``panic`` / development ``dpanic`` control flow.
"""
from __future__ import annotations

from typing import Any


class KvlogError(Exception):
    """Root of the kvlog error hierarchy.

    Args:
        message: Human-readable description.
        code: Machine-readable slug (defaults to ``default_code``).
        detail: Arbitrary extra context (serialisable dict).
        cause: Original exception that triggered this error.
    """

    default_code: str = "kvlog_error"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        detail: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail: dict[str, Any] = detail or {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain dict (safe for HTTP responses)."""
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "detail": self.detail,
        }
        if self.cause is not None:
            payload["cause"] = repr(self.cause)
        return payload


class UnknownLevelError(KvlogError, ValueError):
    """A level name or number does not map to any :class:`~kvlog.level.Level`."""

    default_code = "unknown_level"

    def __init__(self, value: object) -> None:
        super().__init__(f"unrecognized level: {value!r}", detail={"value": str(value)})
        self.value = value


class PanicError(KvlogError):
    """Raised after a ``panic`` (or development ``dpanic``) record is written."""

    default_code = "panic"

    def __init__(self, message: str, level: Any = None) -> None:
        super().__init__(message, detail={"level": str(level)} if level is not None else None)
        self.level = level


class ConfigError(KvlogError):
    """Raised when logger configuration is invalid or loading failed."""

    default_code = "config_error"


class MissingRequiredSettingError(ConfigError):
    """A required environment variable / setting is absent."""

    default_code = "missing_required_setting"

    def __init__(self, setting_name: str) -> None:
        super().__init__(f"Required setting '{setting_name}' is missing")
        self.setting_name = setting_name


class InvalidSettingValueError(ConfigError):
    """A setting's value is present but semantically invalid."""

    default_code = "invalid_setting_value"

    def __init__(self, setting_name: str, value: object, reason: str) -> None:
        super().__init__(f"Setting '{setting_name}' has invalid value {value!r}: {reason}")
        self.setting_name = setting_name
        self.value = value
        self.reason = reason


__all__ = [
    "ConfigError",
    "InvalidSettingValueError",
    "KvlogError",
    "MissingRequiredSettingError",
    "PanicError",
    "UnknownLevelError",
]
