"""OTP Verification Flow - the page a redirected login lands on."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional, Union

from device_guard.common.constants import FormTokenConstants, Messages, RouteConstants
from device_guard.core.types import VerificationOutcome, VerificationStatus
from device_guard.data.schemas import Account, DeviceRecord
from device_guard.devices.identity import ClientTokenStore, DeviceIdentityResolver
from device_guard.devices.registry import DeviceRegistry
from device_guard.otp.challenge import OTPChallengeManager
from device_guard.security.form_tokens import FormTokenSigner
from device_guard.storage.base import AccountStore

logger = logging.getLogger(__name__)


class SessionHost(ABC):
    """The host's session layer, as seen by the verification flow."""

    @abstractmethod
    def is_authenticated(self, account: Account) -> bool:
        """True if the caller already holds a session for this account."""
        pass

    @abstractmethod
    def establish(self, account: Account) -> None:
        """Log the account in on the current client."""
        pass


class OTPVerificationFlow:
    """Admits a device once the emailed code is entered."""

    def __init__(
        self,
        store: AccountStore,
        registry: DeviceRegistry,
        challenges: OTPChallengeManager,
        resolver: DeviceIdentityResolver,
        form_tokens: FormTokenSigner,
        landing_path: str = RouteConstants.LANDING_PATH,
    ):
        self.store = store
        self.registry = registry
        self.challenges = challenges
        self.resolver = resolver
        self.form_tokens = form_tokens
        self.landing_path = landing_path

    def form_token(self, username: str) -> str:
        """Forgery token to embed in the code form for this username."""
        return self.form_tokens.issue(FormTokenConstants.VERIFY_OTP_ACTION, username)

    def open(
        self,
        username: str,
        token_store: ClientTokenStore,
        session: SessionHost,
    ) -> VerificationOutcome:
        """Decide what the verification page shows before any submission."""
        account = self.store.get_by_name(username) if username else None
        if account is None:
            return VerificationOutcome(VerificationStatus.INERT)
        if self._already_admitted(account, token_store, session):
            return VerificationOutcome(VerificationStatus.REDIRECT, redirect_to=self.landing_path)
        return VerificationOutcome(VerificationStatus.FORM)

    def submit(
        self,
        username: str,
        code: Union[str, int, None],
        form_token: Optional[str],
        token_store: ClientTokenStore,
        session: SessionHost,
        now: Optional[datetime] = None,
    ) -> VerificationOutcome:
        """Handle a code submission.

        Raises:
            ForgeryTokenError: If the form token is missing or invalid
        """
        opened = self.open(username, token_store, session)
        if opened.status != VerificationStatus.FORM:
            return opened

        account = self.store.get_by_name(username)
        self.form_tokens.require(form_token, FormTokenConstants.VERIFY_OTP_ACTION, username)

        now = now or datetime.now(timezone.utc)
        challenge = self.challenges.peek(account)
        if not self.challenges.check(challenge, code, now, self.challenges.ttl):
            logger.info(f"OTP verification failed for {account.username}")
            return VerificationOutcome(
                VerificationStatus.RETRY, error=Messages.INVALID_OR_EXPIRED_CODE
            )

        record = DeviceRecord(
            id=challenge.claiming_device_id,
            agent=challenge.agent,
            approved_at=now,
            ip_address=challenge.ip_address,
            device_class=challenge.device_class,
        )
        self.registry.approve(account, record)
        self.challenges.consume(account)
        session.establish(account)
        logger.info(f"Device verified for {account.username}")
        return VerificationOutcome(VerificationStatus.REDIRECT, redirect_to=self.landing_path)

    def _already_admitted(
        self,
        account: Account,
        token_store: ClientTokenStore,
        session: SessionHost,
    ) -> bool:
        if not session.is_authenticated(account):
            return False
        device_id = self.resolver.current(token_store)
        return device_id is not None and self.registry.contains(account, device_id)
