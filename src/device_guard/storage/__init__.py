"""Account store backends."""

from device_guard.common.config import Config, StorageBackend
from device_guard.storage.base import AccountStore
from device_guard.storage.memory import InMemoryAccountStore


def build_account_store(config: Config) -> AccountStore:
    """Create the account store selected by configuration."""
    if config.storage_backend == StorageBackend.DYNAMODB:
        from device_guard.storage.dynamodb import DynamoDBAccountStore
        return DynamoDBAccountStore(
            table_name=config.dynamodb_table,
            region=config.aws_region,
        )
    return InMemoryAccountStore()


__all__ = [
    "AccountStore",
    "InMemoryAccountStore",
    "build_account_store",
]
