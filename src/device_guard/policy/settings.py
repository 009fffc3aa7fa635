"""Device limit setting - admin-editable, global, default from the policy file."""

import logging
from typing import Any

from device_guard.common.constants import StorageKeys
from device_guard.common.exceptions import ValidationError
from device_guard.policy.rules import DevicePolicyRules
from device_guard.storage.base import AccountStore

logger = logging.getLogger(__name__)


def sanitize_limit(value: Any) -> int:
    """Absolute integer value of the input; anything unparsable becomes 0."""
    if isinstance(value, bool):
        return 0
    try:
        return abs(int(str(value).strip()))
    except (TypeError, ValueError):
        return 0


class DevicePolicyService:
    """Reads and writes the global device limit.

    The limit applies uniformly to every account, administrators included.
    """

    def __init__(self, store: AccountStore, rules: DevicePolicyRules):
        self.store = store
        self.rules = rules

    def device_limit(self) -> int:
        stored = sanitize_limit(self.store.get_option(StorageKeys.DEVICE_LIMIT))
        if stored >= 1:
            return stored
        return self.rules.devices.default_limit

    def set_device_limit(self, value: Any) -> int:
        """Persist a new limit.

        Raises:
            ValidationError: If the sanitized value is not a positive integer
        """
        limit = sanitize_limit(value)
        if limit < 1:
            raise ValidationError(
                "Device limit must be a positive integer",
                details={"value": str(value)},
            )
        self.store.set_option(StorageKeys.DEVICE_LIMIT, limit)
        logger.info(f"Device limit set to {limit}")
        return limit
