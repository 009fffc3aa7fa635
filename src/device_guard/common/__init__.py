"""Common utilities - logging, config, exceptions."""

from device_guard.common.logging.logger import get_logger
from device_guard.common.config import Config, get_config, reset_config
from device_guard.common.exceptions import (
    DeviceGuardException,
    ConfigurationError,
    ValidationError,
    NotFoundError,
    AuthorizationError,
    ForgeryTokenError,
    TokenPersistError,
    StorageError,
)

__all__ = [
    # Logging
    "get_logger",
    # Config
    "Config",
    "get_config",
    "reset_config",
    # Exceptions
    "DeviceGuardException",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "AuthorizationError",
    "ForgeryTokenError",
    "TokenPersistError",
    "StorageError",
]
