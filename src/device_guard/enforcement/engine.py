"""Login Enforcement Engine - decides what happens to a password-verified login.

Called once per login attempt, after the host has verified the password.
Rules are evaluated in strict order and the first match wins:

    1. Known device                 -> ALLOW
    2. Live pending challenge       -> REDIRECT to verification (no new code, no mail)
    3. Stale pending challenge      -> clear it, continue once as if none existed
    4. Under the device limit       -> issue a code and mail it
                                       mail ok     -> REDIRECT to verification
                                       mail failed -> clear the code, REJECT
    5. At or over the device limit  -> REJECT

Two concurrent attempts for the same account may both see spare capacity and
both issue a challenge; the later write wins and the earlier code stops
verifying. That is accepted: the losing device just logs in again.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from device_guard.common.constants import Messages, RouteConstants
from device_guard.core.types import ClientContext, LoginOutcome, RejectKind
from device_guard.data.schemas import Account
from device_guard.devices.registry import DeviceRegistry
from device_guard.mail.base import MailService
from device_guard.mail.templates import new_device_code_message
from device_guard.otp.challenge import OTPChallengeManager

logger = logging.getLogger(__name__)


class LoginEnforcementEngine:
    """The OTP-gated device allow-list state machine."""

    def __init__(
        self,
        registry: DeviceRegistry,
        challenges: OTPChallengeManager,
        mailer: MailService,
        verify_path: str = RouteConstants.VERIFY_PATH,
    ):
        self.registry = registry
        self.challenges = challenges
        self.mailer = mailer
        self.verify_path = verify_path

    def enforce(
        self,
        account: Account,
        username: str,
        device_id: str,
        client: ClientContext,
        device_limit: int,
        now: Optional[datetime] = None,
    ) -> LoginOutcome:
        """Evaluate one login attempt.

        Args:
            account: The password-verified account
            username: Name the user logged in with, echoed into the redirect
            device_id: Resolved fingerprint of the current client
            client: User-Agent, IP and device class of the current request
            device_limit: Maximum approved devices, resolved once per attempt
            now: Evaluation time (defaults to the current UTC time)

        Returns:
            ALLOW, REDIRECT to the verification page, or a typed REJECT
        """
        if device_limit < 1:
            raise ValueError(f"device_limit must be a positive integer, got {device_limit}")
        now = now or datetime.now(timezone.utc)

        if self.registry.contains(account, device_id):
            return LoginOutcome.allow()

        challenge = self.challenges.peek(account)
        if challenge is not None:
            if self.challenges.is_live(challenge, now, self.challenges.ttl):
                logger.info(f"Pending challenge still live for {account.username}, redirecting")
                return self._to_verification(username)
            logger.info(f"Expired challenge cleared for {account.username}")
            self.challenges.consume(account)

        device_count = len(self.registry.list(account))
        if device_count >= device_limit:
            logger.warning(
                f"Device limit reached for {account.username} ({device_count}/{device_limit})"
            )
            return LoginOutcome.reject(
                RejectKind.DEVICE_LIMIT_REACHED, Messages.DEVICE_LIMIT_REACHED
            )

        code = self.challenges.issue(
            account,
            device_id=device_id,
            agent=client.user_agent,
            ip_address=client.ip_address,
            device_class=client.device_class,
            now=now,
        )
        subject, body = new_device_code_message(account.greeting_name, code)
        try:
            sent = self.mailer.send(account.email, subject, body)
        except Exception as e:
            logger.error(f"OTP mail to {account.username} raised: {e}")
            sent = False
        if not sent:
            self.challenges.consume(account)
            logger.error(f"OTP mail to {account.username} failed, challenge rolled back")
            return LoginOutcome.reject(
                RejectKind.EMAIL_DELIVERY_FAILED, Messages.EMAIL_DELIVERY_FAILED
            )

        return self._to_verification(username)

    def _to_verification(self, username: str) -> LoginOutcome:
        return LoginOutcome.redirect(
            self.verify_path, {RouteConstants.USERNAME_QUERY_PARAM: username}
        )
