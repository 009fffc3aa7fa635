"""SMTP mail delivery."""

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from device_guard.mail.base import MailService

logger = logging.getLogger(__name__)


class SMTPMailService(MailService):
    """Delivers messages through an SMTP relay, one connection per message."""

    DEFAULT_TIMEOUT_SECONDS = 10.0

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        from_address: str = "no-reply@localhost",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_address = from_address
        self.timeout = timeout

    def _build_message(self, to_address: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.from_address
        message["To"] = to_address
        message["Subject"] = subject
        message.set_content(body, charset="utf-8")
        return message

    def send(self, to_address: str, subject: str, body: str) -> bool:
        message = self._build_message(to_address, subject, body)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password or "")
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP delivery to {to_address} via {self.host}:{self.port} failed: {e}")
            return False

        logger.info(f"Mail sent to {to_address}: {subject!r}")
        return True
