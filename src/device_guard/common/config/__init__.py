"""Configuration module - environment-driven settings."""

from device_guard.common.config.settings import (
    Config,
    Environment,
    LogLevel,
    MailBackend,
    StorageBackend,
    get_config,
    reset_config,
)

__all__ = [
    "Config",
    "Environment",
    "LogLevel",
    "MailBackend",
    "StorageBackend",
    "get_config",
    "reset_config",
]
