"""Configuration management - Centralized configuration for Device Guard.

Provides environment-aware configuration with sensible defaults.
All configuration is loaded from environment variables with fallbacks.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


DEVELOPMENT_SECRET_KEY = "development-only"


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StorageBackend(str, Enum):
    """Account store backend types."""
    MEMORY = "memory"
    DYNAMODB = "dynamodb"


class MailBackend(str, Enum):
    """Mail delivery backend types."""
    LOGGING = "logging"
    SMTP = "smtp"


def _get_project_root() -> Path:
    """Get the project root directory."""
    # settings.py -> config -> common -> device_guard -> src -> project_root
    current = Path(__file__).resolve()
    return current.parent.parent.parent.parent.parent


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class Config:
    """Central configuration object for Device Guard.

    All settings can be overridden via environment variables prefixed with
    DEVICE_GUARD_.

    Example:
        DEVICE_GUARD_ENVIRONMENT=production
        DEVICE_GUARD_SECRET_KEY=...
        DEVICE_GUARD_STORAGE_BACKEND=dynamodb
        DEVICE_GUARD_DYNAMODB_TABLE=device-guard-accounts
    """

    # Core settings
    environment: Environment = field(
        default_factory=lambda: Environment(
            os.getenv("DEVICE_GUARD_ENVIRONMENT", "development")
        )
    )
    debug: bool = field(
        default_factory=lambda: _env_flag("DEVICE_GUARD_DEBUG", "false")
    )
    log_level: LogLevel = field(
        default_factory=lambda: LogLevel(os.getenv("DEVICE_GUARD_LOG_LEVEL", "INFO"))
    )

    # Paths
    project_root: Path = field(default_factory=_get_project_root)
    policy_file: Optional[Path] = field(
        default_factory=lambda: (
            Path(os.environ["DEVICE_GUARD_POLICY_FILE"])
            if os.getenv("DEVICE_GUARD_POLICY_FILE") else None
        )
    )

    # API settings
    api_host: str = field(
        default_factory=lambda: os.getenv("DEVICE_GUARD_API_HOST", "0.0.0.0")
    )
    api_port: int = field(
        default_factory=lambda: int(os.getenv("DEVICE_GUARD_API_PORT", "8000"))
    )

    # Signing key for forgery-prevention form tokens
    secret_key: str = field(
        default_factory=lambda: os.getenv("DEVICE_GUARD_SECRET_KEY", DEVELOPMENT_SECRET_KEY)
    )

    # Account store
    storage_backend: StorageBackend = field(
        default_factory=lambda: StorageBackend(
            os.getenv("DEVICE_GUARD_STORAGE_BACKEND", "memory")
        )
    )
    dynamodb_table: Optional[str] = field(
        default_factory=lambda: os.getenv("DEVICE_GUARD_DYNAMODB_TABLE")
    )
    aws_region: str = field(
        default_factory=lambda: os.getenv("AWS_DEFAULT_REGION", "us-east-1")
    )

    # Mail delivery
    mail_backend: MailBackend = field(
        default_factory=lambda: MailBackend(
            os.getenv("DEVICE_GUARD_MAIL_BACKEND", "logging")
        )
    )
    smtp_host: str = field(
        default_factory=lambda: os.getenv("DEVICE_GUARD_SMTP_HOST", "localhost")
    )
    smtp_port: int = field(
        default_factory=lambda: int(os.getenv("DEVICE_GUARD_SMTP_PORT", "587"))
    )
    smtp_username: Optional[str] = field(
        default_factory=lambda: os.getenv("DEVICE_GUARD_SMTP_USERNAME")
    )
    smtp_password: Optional[str] = field(
        default_factory=lambda: os.getenv("DEVICE_GUARD_SMTP_PASSWORD")
    )
    smtp_use_tls: bool = field(
        default_factory=lambda: _env_flag("DEVICE_GUARD_SMTP_USE_TLS", "true")
    )
    mail_from: str = field(
        default_factory=lambda: os.getenv("DEVICE_GUARD_MAIL_FROM", "no-reply@localhost")
    )

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.storage_backend == StorageBackend.DYNAMODB and not self.dynamodb_table:
            raise ValueError(
                "DEVICE_GUARD_DYNAMODB_TABLE must be set when using DynamoDB storage"
            )

        if self.environment == Environment.PRODUCTION and self.secret_key == DEVELOPMENT_SECRET_KEY:
            raise ValueError(
                "DEVICE_GUARD_SECRET_KEY must be set in production"
            )

        # Warn about debug in production
        if self.environment == Environment.PRODUCTION and self.debug:
            import warnings
            warnings.warn(
                "Debug mode is enabled in production environment",
                RuntimeWarning,
                stacklevel=2
            )

    @property
    def config_dir(self) -> Path:
        """Get the config directory path."""
        return self.project_root / "config"

    @property
    def resolved_policy_file(self) -> Path:
        """Policy file from the environment, or the bundled default."""
        return self.policy_file or self.config_dir / "device_policy.yaml"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT


# Singleton instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance.

    Returns:
        Config: The global configuration singleton.
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
