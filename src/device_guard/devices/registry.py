"""Device Registry - per-account list of approved devices."""

import logging
from typing import List

from pydantic import ValidationError as PydanticValidationError

from device_guard.common.constants import StorageKeys
from device_guard.data.schemas import Account, DeviceRecord
from device_guard.storage.base import AccountStore

logger = logging.getLogger(__name__)


class DeviceRegistry:
    """Ordered allow-list of approved devices, stored as one account attribute.

    Every operation reads and rewrites the whole list. `approve` never
    deduplicates: approving the same fingerprint twice keeps two records,
    both of which satisfy `contains`.
    """

    def __init__(self, store: AccountStore):
        self.store = store

    def list(self, account: Account) -> List[DeviceRecord]:
        raw = self.store.get_attribute(account, StorageKeys.ALLOWED_DEVICES)
        if not isinstance(raw, list):
            return []

        records: List[DeviceRecord] = []
        for entry in raw:
            try:
                records.append(DeviceRecord.model_validate(entry))
            except PydanticValidationError as e:
                logger.warning(
                    f"Skipping malformed device record for {account.username}: "
                    f"{e.error_count()} error(s)"
                )
        return records

    def contains(self, account: Account, device_id: str) -> bool:
        return any(record.id == device_id for record in self.list(account))

    def approve(self, account: Account, record: DeviceRecord) -> None:
        records = self.list(account)
        records.append(record)
        self._save(account, records)
        logger.info(
            f"Device approved for {account.username}: "
            f"{record.device_class.value} from {record.ip_address} ({len(records)} total)"
        )

    def remove(self, account: Account, device_id: str) -> None:
        """Drop every record with this id. Absent ids are a no-op."""
        records = self.list(account)
        remaining = [record for record in records if record.id != device_id]
        if len(remaining) == len(records):
            return
        self._save(account, remaining)
        logger.info(
            f"Device removed for {account.username}: "
            f"{len(records) - len(remaining)} record(s) dropped"
        )

    def reset_all(self, account: Account) -> None:
        self.store.delete_attribute(account, StorageKeys.ALLOWED_DEVICES)
        logger.info(f"All devices reset for {account.username}")

    def _save(self, account: Account, records: List[DeviceRecord]) -> None:
        self.store.set_attribute(
            account,
            StorageKeys.ALLOWED_DEVICES,
            [record.model_dump(mode="json") for record in records],
        )
