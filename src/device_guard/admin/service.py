"""Device Admin Service - privileged device and policy management.

Every mutating call checks, in this order, before touching any state:
    1. the forgery-prevention form token
    2. that the acting account may manage other accounts' devices
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from device_guard.common.constants import FormTokenConstants, Messages
from device_guard.common.exceptions import AuthorizationError, NotFoundError, ValidationError
from device_guard.data.schemas import Account, DeviceRecord
from device_guard.devices.registry import DeviceRegistry
from device_guard.otp.challenge import OTPChallengeManager
from device_guard.policy.settings import DevicePolicyService
from device_guard.security.form_tokens import FormTokenSigner
from device_guard.storage.base import AccountStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdminActionResult:
    success: bool
    message: str


class DeviceAdminService:
    """Admin operations over other accounts' devices and the device limit."""

    def __init__(
        self,
        store: AccountStore,
        registry: DeviceRegistry,
        challenges: OTPChallengeManager,
        policy: DevicePolicyService,
        form_tokens: FormTokenSigner,
    ):
        self.store = store
        self.registry = registry
        self.challenges = challenges
        self.policy = policy
        self.form_tokens = form_tokens

    def form_token(self, actor: Optional[Account], action: str) -> str:
        """Issue a form token for an admin action."""
        self._require_admin(actor)
        return self.form_tokens.issue(action, actor.username)

    def list_devices(self, actor: Optional[Account], account_id: str) -> List[DeviceRecord]:
        self._require_admin(actor)
        return self.registry.list(self._get_account(account_id))

    def remove_device(
        self,
        actor: Optional[Account],
        account_id: Optional[str],
        device_id: Optional[str],
        form_token: Optional[str],
    ) -> AdminActionResult:
        self._authorize(actor, form_token, FormTokenConstants.DELETE_DEVICE_ACTION)

        if not account_id or not device_id:
            raise ValidationError(Messages.MISSING_DATA)

        account = self.store.get_by_id(account_id)
        if account is None or not self.registry.list(account):
            raise NotFoundError(Messages.NO_DEVICES_FOUND, details={"account_id": account_id})

        self.registry.remove(account, device_id)
        logger.info(f"{actor.username} removed a device from {account.username}")
        return AdminActionResult(success=True, message=Messages.DEVICE_DELETED)

    def reset_devices(
        self,
        actor: Optional[Account],
        account_id: str,
        form_token: Optional[str],
    ) -> AdminActionResult:
        """Account-level reset: every approved device and any pending challenge."""
        self._authorize(actor, form_token, FormTokenConstants.RESET_DEVICES_ACTION)
        account = self._get_account(account_id)

        self.registry.reset_all(account)
        self.challenges.consume(account)
        logger.info(f"{actor.username} reset all devices of {account.username}")
        return AdminActionResult(success=True, message=Messages.DEVICES_RESET)

    def get_device_limit(self, actor: Optional[Account]) -> int:
        self._require_admin(actor)
        return self.policy.device_limit()

    def update_device_limit(
        self,
        actor: Optional[Account],
        value: Any,
        form_token: Optional[str],
    ) -> AdminActionResult:
        self._authorize(actor, form_token, FormTokenConstants.UPDATE_SETTINGS_ACTION)
        self.policy.set_device_limit(value)
        return AdminActionResult(success=True, message=Messages.SETTINGS_SAVED)

    def _authorize(self, actor: Optional[Account], form_token: Optional[str], action: str) -> None:
        subject = actor.username if actor else ""
        self.form_tokens.require(form_token, action, subject)
        self._require_admin(actor)

    @staticmethod
    def _require_admin(actor: Optional[Account]) -> None:
        if actor is None or not actor.is_admin:
            raise AuthorizationError(actor=actor.username if actor else None)

    def _get_account(self, account_id: str) -> Account:
        account = self.store.get_by_id(account_id)
        if account is None:
            raise NotFoundError("Account not found", details={"account_id": account_id})
        return account
