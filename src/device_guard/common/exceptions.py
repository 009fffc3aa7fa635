"""Custom exceptions for Device Guard.

Provides a hierarchy of exceptions for different error types.
All Device Guard exceptions inherit from DeviceGuardException.

Login-path failures (mail delivery, device limit) are NOT raised: they are
returned to the host as rejected LoginOutcome values. Exceptions are used for
configuration problems and for admin / form calls that must be refused.
"""

from typing import Any, Dict, Optional


class DeviceGuardException(Exception):
    """Base exception for all Device Guard errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        code: str = "DEVICE_GUARD_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(DeviceGuardException):
    """Raised when configuration or the policy file is invalid or missing."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFIG_ERROR", details=details)


class ValidationError(DeviceGuardException):
    """Raised when input validation fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class NotFoundError(DeviceGuardException):
    """Raised when an admin call targets an unknown account or device list."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="NOT_FOUND", details=details)


class AuthorizationError(DeviceGuardException):
    """Raised when the caller may not manage other accounts' devices."""

    def __init__(
        self,
        message: str = "Unauthorized",
        actor: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        if actor:
            details["actor"] = actor
        super().__init__(message, code="UNAUTHORIZED", details=details)


class ForgeryTokenError(DeviceGuardException):
    """Raised when a forgery-prevention form token is missing or invalid."""

    def __init__(
        self,
        message: str = "Invalid nonce",
        action: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        if action:
            details["action"] = action
        super().__init__(message, code="INVALID_FORM_TOKEN", details=details)


class TokenPersistError(DeviceGuardException):
    """Raised by a client token store that cannot remember the device id."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="TOKEN_PERSIST_ERROR", details=details)


class StorageError(DeviceGuardException):
    """Raised when the account store backend fails to persist a value."""

    def __init__(
        self,
        message: str,
        backend: str,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["backend"] = backend
        super().__init__(message, code="STORAGE_ERROR", details=details)
