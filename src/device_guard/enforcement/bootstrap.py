"""Bootstrap Approver - one-time approval of the operator's first device.

Run once by deployment tooling when Device Guard is switched on, so the
operator is not locked out by their own policy. It is not part of the
request path.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from device_guard.common.constants import StorageKeys
from device_guard.core.types import ClientContext, DeviceStatus
from device_guard.data.schemas import Account, DeviceRecord
from device_guard.devices.identity import ClientTokenStore, DeviceIdentityResolver
from device_guard.devices.registry import DeviceRegistry
from device_guard.storage.base import AccountStore

logger = logging.getLogger(__name__)


class BootstrapApprover:
    def __init__(
        self,
        store: AccountStore,
        registry: DeviceRegistry,
        resolver: DeviceIdentityResolver,
    ):
        self.store = store
        self.registry = registry
        self.resolver = resolver

    def run(
        self,
        account: Account,
        token_store: ClientTokenStore,
        client: ClientContext,
        now: Optional[datetime] = None,
    ) -> Optional[DeviceRecord]:
        """Approve the current client for the acting account, bypassing OTP.

        Returns:
            The approved record, or None if bootstrap already happened or the
            account already has an approved device
        """
        completed_by = self.store.get_option(StorageKeys.BOOTSTRAP_COMPLETED)
        if completed_by:
            logger.info(f"Bootstrap already completed by account {completed_by}, skipping")
            return None

        if any(r.status == DeviceStatus.APPROVED for r in self.registry.list(account)):
            logger.info(f"{account.username} already has an approved device, skipping bootstrap")
            return None

        device_id = self.resolver.resolve(token_store, client.user_agent)
        record = DeviceRecord(
            id=device_id,
            agent=client.user_agent,
            approved_at=now or datetime.now(timezone.utc),
            ip_address=client.ip_address,
            device_class=client.device_class,
            status=DeviceStatus.APPROVED,
        )
        self.registry.approve(account, record)
        self.store.set_option(StorageKeys.BOOTSTRAP_COMPLETED, account.account_id)
        logger.info(f"Bootstrap approved first device for {account.username}")
        return record
