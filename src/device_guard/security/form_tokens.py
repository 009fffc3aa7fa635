"""Forgery-prevention form tokens.

A token is `<issued_at>.<hex hmac-sha256>` over the action name, the subject
(the acting username) and the issue time. Tokens expire after a fixed TTL.
"""

import hashlib
import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional

from device_guard.common.constants import FormTokenConstants
from device_guard.common.exceptions import ForgeryTokenError

# Tolerated clock skew for tokens stamped slightly in the future.
_MAX_SKEW = timedelta(seconds=60)


class FormTokenSigner:
    def __init__(
        self,
        secret_key: str,
        ttl: timedelta = timedelta(hours=FormTokenConstants.TTL_HOURS),
    ):
        if not secret_key:
            raise ValueError("secret_key is required")
        self._key = secret_key.encode("utf-8")
        self.ttl = ttl

    def _sign(self, action: str, subject: str, issued_at: int) -> str:
        message = f"{action}|{subject}|{issued_at}".encode("utf-8")
        return hmac.new(self._key, message, hashlib.sha256).hexdigest()

    def issue(self, action: str, subject: str, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        issued_at = int(now.timestamp())
        return f"{issued_at}.{self._sign(action, subject, issued_at)}"

    def verify(
        self,
        token: Optional[str],
        action: str,
        subject: str,
        now: Optional[datetime] = None,
    ) -> bool:
        if not token or "." not in token:
            return False
        stamp, signature = token.split(".", 1)
        try:
            issued_at = int(stamp)
        except ValueError:
            return False

        now = now or datetime.now(timezone.utc)
        try:
            issued = datetime.fromtimestamp(issued_at, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return False
        if issued - now > _MAX_SKEW or now - issued > self.ttl:
            return False
        return hmac.compare_digest(signature, self._sign(action, subject, issued_at))

    def require(
        self,
        token: Optional[str],
        action: str,
        subject: str,
        now: Optional[datetime] = None,
    ) -> None:
        """Raise ForgeryTokenError unless the token is valid for this action and subject."""
        if not self.verify(token, action, subject, now):
            raise ForgeryTokenError(action=action)
