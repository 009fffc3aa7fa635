"""Mail delivery backends."""

from device_guard.common.config import Config, MailBackend
from device_guard.mail.base import LoggingMailService, MailService
from device_guard.mail.smtp import SMTPMailService


def build_mail_service(config: Config) -> MailService:
    """Create the mail backend selected by configuration."""
    if config.mail_backend == MailBackend.SMTP:
        return SMTPMailService(
            host=config.smtp_host,
            port=config.smtp_port,
            username=config.smtp_username,
            password=config.smtp_password,
            use_tls=config.smtp_use_tls,
            from_address=config.mail_from,
        )
    return LoggingMailService()


__all__ = [
    "LoggingMailService",
    "MailService",
    "SMTPMailService",
    "build_mail_service",
]
