"""DynamoDB account store for accounts, per-account attributes and options."""

import json
import logging
import os
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import ClientError

from device_guard.common.exceptions import StorageError
from device_guard.data.schemas import Account
from device_guard.storage.base import AccountStore

logger = logging.getLogger(__name__)


class DynamoDBAccountStore(AccountStore):
    """Single-table DynamoDB store.

    Item layout:
        pk=ACCOUNT#<id>  sk=PROFILE        account fields, gsi1_pk=USERNAME#<name>
        pk=ACCOUNT#<id>  sk=ATTR#<key>     value (JSON string)
        pk=OPTION        sk=OPTION#<key>   value (JSON string)

    Values are stored as JSON strings so nested lists of device records
    round-trip without Decimal conversion.
    """

    DEFAULT_REGION = "us-east-1"
    USERNAME_INDEX = "gsi1_pk-index"
    BACKEND = "dynamodb"

    def __init__(
        self,
        table_name: Optional[str] = None,
        region: Optional[str] = None,
        aws_profile: Optional[str] = None,
    ):
        self.table_name = table_name or os.environ.get("DEVICE_GUARD_DYNAMODB_TABLE")
        if not self.table_name:
            raise ValueError("DEVICE_GUARD_DYNAMODB_TABLE required")

        self.region = region or os.environ.get("AWS_REGION", self.DEFAULT_REGION)

        if aws_profile:
            session = boto3.Session(profile_name=aws_profile)
            self.dynamodb = session.resource("dynamodb", region_name=self.region)
        else:
            self.dynamodb = boto3.resource("dynamodb", region_name=self.region)

        self.table = self.dynamodb.Table(self.table_name)
        logger.info(f"DynamoDB account store initialized: {self.table_name} ({self.region})")

    # ========== KEYS ==========

    @staticmethod
    def _account_pk(account_id: str) -> str:
        return f"ACCOUNT#{account_id}"

    @staticmethod
    def _attribute_key(account_id: str, key: str) -> Dict[str, str]:
        return {"pk": f"ACCOUNT#{account_id}", "sk": f"ATTR#{key}"}

    @staticmethod
    def _option_key(key: str) -> Dict[str, str]:
        return {"pk": "OPTION", "sk": f"OPTION#{key}"}

    @staticmethod
    def _to_account(item: Dict[str, Any]) -> Account:
        return Account(
            account_id=item["account_id"],
            username=item["username"],
            email=item["email"],
            display_name=item.get("display_name", ""),
            is_admin=bool(item.get("is_admin", False)),
        )

    def _get_value(self, key: Dict[str, str]) -> Optional[Any]:
        try:
            resp = self.table.get_item(Key=key)
        except ClientError as e:
            logger.error(f"get_item failed ({key['pk']}/{key['sk']}): {e}")
            return None
        item = resp.get("Item")
        if not item or "value" not in item:
            return None
        return json.loads(item["value"])

    def _put_value(self, key: Dict[str, str], value: Any) -> None:
        try:
            self.table.put_item(Item={**key, "value": json.dumps(value)})
        except ClientError as e:
            logger.error(f"put_item failed ({key['pk']}/{key['sk']}): {e}")
            raise StorageError(f"Failed to write {key['sk']}", backend=self.BACKEND) from e

    # ========== ACCOUNTS ==========

    def put_account(self, account: Account) -> Account:
        """Provision an account item (host-side, used by tooling and tests)."""
        item = {
            "pk": self._account_pk(account.account_id),
            "sk": "PROFILE",
            "gsi1_pk": f"USERNAME#{account.username}",
            **account.model_dump(),
        }
        try:
            self.table.put_item(Item=item)
        except ClientError as e:
            logger.error(f"put_account failed: {e}")
            raise StorageError("Failed to write account", backend=self.BACKEND) from e
        return account

    def get_by_name(self, username: str) -> Optional[Account]:
        try:
            resp = self.table.query(
                IndexName=self.USERNAME_INDEX,
                KeyConditionExpression="gsi1_pk = :name",
                ExpressionAttributeValues={":name": f"USERNAME#{username}"},
                Limit=1,
            )
        except ClientError as e:
            logger.error(f"get_by_name failed: {e}")
            return None
        items = resp.get("Items", [])
        return self._to_account(items[0]) if items else None

    def get_by_id(self, account_id: str) -> Optional[Account]:
        try:
            resp = self.table.get_item(Key={"pk": self._account_pk(account_id), "sk": "PROFILE"})
        except ClientError as e:
            logger.error(f"get_by_id failed: {e}")
            return None
        if item := resp.get("Item"):
            return self._to_account(item)
        return None

    # ========== ATTRIBUTES ==========

    def get_attribute(self, account: Account, key: str) -> Optional[Any]:
        return self._get_value(self._attribute_key(account.account_id, key))

    def set_attribute(self, account: Account, key: str, value: Any) -> None:
        self._put_value(self._attribute_key(account.account_id, key), value)

    def delete_attribute(self, account: Account, key: str) -> None:
        try:
            self.table.delete_item(Key=self._attribute_key(account.account_id, key))
        except ClientError as e:
            logger.error(f"delete_item failed ({key}): {e}")
            raise StorageError(f"Failed to delete {key}", backend=self.BACKEND) from e

    # ========== OPTIONS ==========

    def get_option(self, key: str) -> Optional[Any]:
        return self._get_value(self._option_key(key))

    def set_option(self, key: str, value: Any) -> None:
        self._put_value(self._option_key(key), value)

    def health_check(self) -> bool:
        try:
            self.table.table_status
            return True
        except ClientError as e:
            logger.error(f"Health check failed: {e}")
            return False
