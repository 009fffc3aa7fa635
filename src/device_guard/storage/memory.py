"""In-memory account store for development, the CLI and tests."""

import copy
import logging
import threading
from typing import Any, Dict, Optional, Tuple

from device_guard.data.schemas import Account
from device_guard.storage.base import AccountStore

logger = logging.getLogger(__name__)


class InMemoryAccountStore(AccountStore):
    """Dict-backed account store.

    Values are deep-copied on the way in and out so callers always work on
    their own snapshot, as they would against a remote store. The lock makes
    each single read or write atomic; it never spans a read-modify-write.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._accounts: Dict[str, Account] = {}
        self._attributes: Dict[Tuple[str, str], Any] = {}
        self._options: Dict[str, Any] = {}

    def add_account(self, account: Account) -> Account:
        """Register an account (host-side provisioning, not a core operation)."""
        with self._lock:
            self._accounts[account.account_id] = account
        logger.debug(f"Account added: {account.username}")
        return account

    def get_by_name(self, username: str) -> Optional[Account]:
        with self._lock:
            for account in self._accounts.values():
                if account.username == username:
                    return account
        return None

    def get_by_id(self, account_id: str) -> Optional[Account]:
        with self._lock:
            return self._accounts.get(account_id)

    def get_attribute(self, account: Account, key: str) -> Optional[Any]:
        with self._lock:
            return copy.deepcopy(self._attributes.get((account.account_id, key)))

    def set_attribute(self, account: Account, key: str, value: Any) -> None:
        with self._lock:
            self._attributes[(account.account_id, key)] = copy.deepcopy(value)

    def delete_attribute(self, account: Account, key: str) -> None:
        with self._lock:
            self._attributes.pop((account.account_id, key), None)

    def get_option(self, key: str) -> Optional[Any]:
        with self._lock:
            return copy.deepcopy(self._options.get(key))

    def set_option(self, key: str, value: Any) -> None:
        with self._lock:
            self._options[key] = copy.deepcopy(value)
