"""Account Store - Abstraction over the external account store.

Device Guard keeps all of its state (approved devices, the pending OTP
challenge, the global device limit) as named attributes in the host's
account store. Every read and write moves a whole value; there is no
partial update and no locking across a read-modify-write.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from device_guard.data.schemas import Account


class AccountStore(ABC):
    """Abstract base class for account store backends."""

    @abstractmethod
    def get_by_name(self, username: str) -> Optional[Account]:
        """Look up an account by login name.

        Returns:
            The account, or None if no account has that name
        """
        pass

    @abstractmethod
    def get_by_id(self, account_id: str) -> Optional[Account]:
        """Look up an account by its identifier."""
        pass

    @abstractmethod
    def get_attribute(self, account: Account, key: str) -> Optional[Any]:
        """Read a named per-account value, or None if unset."""
        pass

    @abstractmethod
    def set_attribute(self, account: Account, key: str, value: Any) -> None:
        """Replace a named per-account value.

        Raises:
            StorageError: If the backend fails to persist the value
        """
        pass

    @abstractmethod
    def delete_attribute(self, account: Account, key: str) -> None:
        """Delete a named per-account value. Deleting an unset key is a no-op."""
        pass

    @abstractmethod
    def get_option(self, key: str) -> Optional[Any]:
        """Read a global (not per-account) option."""
        pass

    @abstractmethod
    def set_option(self, key: str, value: Any) -> None:
        """Replace a global option."""
        pass
