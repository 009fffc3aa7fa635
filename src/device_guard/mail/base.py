"""Mail Service - interface for out-of-band OTP delivery."""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class MailService(ABC):
    """Sends a plain-text message and reports whether it was accepted."""

    @abstractmethod
    def send(self, to_address: str, subject: str, body: str) -> bool:
        """Attempt delivery.

        Returns:
            True if the message was handed off, False otherwise. Delivery
            problems are reported through the return value, not raised.
        """
        pass


class LoggingMailService(MailService):
    """Development backend: writes the message to the log instead of sending.

    Never use in production; the OTP code ends up in the logs.
    """

    def send(self, to_address: str, subject: str, body: str) -> bool:
        logger.warning(
            f"Mail not sent (logging backend) to={to_address} subject={subject!r}\n{body}"
        )
        return True
