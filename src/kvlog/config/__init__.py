"""Config – 12-factor logger settings and loaders."""
from kvlog.config.factory import build_logger
from kvlog.config.loaders import EnvSettingsLoader, SettingsLoader
from kvlog.config.settings import LoggerSettings, Settings

__all__ = ["EnvSettingsLoader", "LoggerSettings", "Settings", "SettingsLoader", "build_logger"]
