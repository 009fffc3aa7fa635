"""OTP Challenge Manager - the single pending challenge of an account.

Each account has at most one live challenge. Issuing a new one overwrites the
slot unconditionally, so an earlier code stops verifying the moment a later
one is issued. Expiry is evaluated lazily on access; nothing sweeps the slot.
"""

import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from pydantic import ValidationError as PydanticValidationError

from device_guard.common.constants import OTPConstants, StorageKeys
from device_guard.core.types import DeviceClass
from device_guard.data.schemas import Account, OTPChallenge
from device_guard.storage.base import AccountStore

logger = logging.getLogger(__name__)


def generate_code() -> int:
    """Uniform 6-digit code in [100000, 999999] from a CSPRNG."""
    span = OTPConstants.CODE_MAX - OTPConstants.CODE_MIN + 1
    return OTPConstants.CODE_MIN + secrets.randbelow(span)


def _normalize_submission(submitted: Union[str, int, None]) -> Optional[str]:
    if submitted is None or isinstance(submitted, bool):
        return None
    text = str(submitted).strip()
    if not (text.isascii() and text.isdigit()):
        return None
    return text.lstrip("0") or "0"


class OTPChallengeManager:
    """Creates, reads, verifies and clears the per-account OTP slot."""

    def __init__(self, store: AccountStore, ttl: timedelta = OTPConstants.TTL):
        self.store = store
        self.ttl = ttl

    def issue(
        self,
        account: Account,
        device_id: str,
        agent: str,
        ip_address: str,
        device_class: DeviceClass,
        now: Optional[datetime] = None,
    ) -> int:
        """Store a fresh pending challenge, replacing any existing one.

        Returns:
            The code, for delivery by the caller
        """
        code = generate_code()
        challenge = OTPChallenge(
            code=code,
            claiming_device_id=device_id,
            agent=agent,
            ip_address=ip_address,
            device_class=device_class,
            created_at=now or datetime.now(timezone.utc),
        )
        self.store.set_attribute(
            account, StorageKeys.DEVICE_OTP, challenge.model_dump(mode="json")
        )
        logger.info(f"OTP challenge issued for {account.username}")
        return code

    def peek(self, account: Account) -> Optional[OTPChallenge]:
        raw = self.store.get_attribute(account, StorageKeys.DEVICE_OTP)
        if not raw:
            return None
        try:
            return OTPChallenge.model_validate(raw)
        except PydanticValidationError:
            logger.warning(f"Ignoring malformed OTP challenge for {account.username}")
            return None

    @staticmethod
    def is_live(
        challenge: OTPChallenge,
        now: Optional[datetime] = None,
        ttl: timedelta = OTPConstants.TTL,
    ) -> bool:
        now = now or datetime.now(timezone.utc)
        return now - challenge.created_at <= ttl

    def consume(self, account: Account) -> None:
        self.store.delete_attribute(account, StorageKeys.DEVICE_OTP)

    def verify(
        self,
        account: Account,
        submitted_code: Union[str, int, None],
        now: Optional[datetime] = None,
        ttl: Optional[timedelta] = None,
    ) -> bool:
        """Check a submitted code against the live challenge.

        Never mutates the slot: a wrong code leaves the challenge in place
        for another attempt, and a correct one must be followed by
        `consume` and a registry approval by the caller.
        """
        return self.check(self.peek(account), submitted_code, now, ttl or self.ttl)

    @staticmethod
    def check(
        challenge: Optional[OTPChallenge],
        submitted_code: Union[str, int, None],
        now: Optional[datetime] = None,
        ttl: timedelta = OTPConstants.TTL,
    ) -> bool:
        """Check a submitted code against an already-read challenge."""
        if challenge is None:
            return False
        if not OTPChallengeManager.is_live(challenge, now, ttl):
            return False

        submitted = _normalize_submission(submitted_code)
        if submitted is None:
            return False
        return hmac.compare_digest(submitted, str(challenge.code))
