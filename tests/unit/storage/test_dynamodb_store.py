"""Unit tests for the DynamoDB account store."""

import json
from unittest.mock import MagicMock, PropertyMock, patch

import pytest
from botocore.exceptions import ClientError

from device_guard.common.exceptions import StorageError
from device_guard.storage.dynamodb import DynamoDBAccountStore


def client_error(operation: str) -> ClientError:
    return ClientError(
        {"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "slow down"}},
        operation,
    )


class TestDynamoDBAccountStore:
    """Test DynamoDB account store."""

    @pytest.fixture
    def mock_table(self):
        return MagicMock()

    @pytest.fixture
    def dynamo_store(self, mock_table):
        with patch("boto3.resource") as mock_resource:
            mock_resource.return_value.Table.return_value = mock_table
            store = DynamoDBAccountStore(table_name="test-accounts", region="eu-west-1")
        return store

    def test_requires_table_name(self, monkeypatch):
        monkeypatch.delenv("DEVICE_GUARD_DYNAMODB_TABLE", raising=False)

        with pytest.raises(ValueError):
            DynamoDBAccountStore()

    def test_uses_configured_table(self, dynamo_store, mock_table):
        assert dynamo_store.table is mock_table
        assert dynamo_store.region == "eu-west-1"

    def test_get_by_name_queries_username_index(self, dynamo_store, mock_table):
        mock_table.query.return_value = {
            "Items": [{
                "account_id": "1001",
                "username": "alice",
                "email": "alice@example.com",
                "display_name": "Alice",
                "is_admin": False,
            }]
        }

        account = dynamo_store.get_by_name("alice")

        assert account.account_id == "1001"
        assert account.greeting_name == "Alice"
        kwargs = mock_table.query.call_args[1]
        assert kwargs["IndexName"] == "gsi1_pk-index"
        assert kwargs["ExpressionAttributeValues"] == {":name": "USERNAME#alice"}

    def test_get_by_name_not_found(self, dynamo_store, mock_table):
        mock_table.query.return_value = {"Items": []}

        assert dynamo_store.get_by_name("nobody") is None

    def test_get_by_id(self, dynamo_store, mock_table):
        mock_table.get_item.return_value = {
            "Item": {"account_id": "1", "username": "admin", "email": "a@example.com", "is_admin": True}
        }

        account = dynamo_store.get_by_id("1")

        assert account.is_admin is True
        assert mock_table.get_item.call_args[1]["Key"] == {"pk": "ACCOUNT#1", "sk": "PROFILE"}

    def test_put_account(self, dynamo_store, mock_table, alice):
        dynamo_store.put_account(alice)

        item = mock_table.put_item.call_args[1]["Item"]
        assert item["pk"] == "ACCOUNT#1001"
        assert item["sk"] == "PROFILE"
        assert item["gsi1_pk"] == "USERNAME#alice"
        assert item["email"] == "alice@example.com"

    def test_set_attribute_stores_json(self, dynamo_store, mock_table, alice):
        dynamo_store.set_attribute(alice, "device_guard_allowed_devices", [{"id": "dev-a"}])

        item = mock_table.put_item.call_args[1]["Item"]
        assert item["pk"] == "ACCOUNT#1001"
        assert item["sk"] == "ATTR#device_guard_allowed_devices"
        assert json.loads(item["value"]) == [{"id": "dev-a"}]

    def test_get_attribute_decodes_json(self, dynamo_store, mock_table, alice):
        mock_table.get_item.return_value = {"Item": {"value": json.dumps({"code": 123456})}}

        assert dynamo_store.get_attribute(alice, "device_guard_device_otp") == {"code": 123456}

    def test_get_attribute_missing(self, dynamo_store, mock_table, alice):
        mock_table.get_item.return_value = {}

        assert dynamo_store.get_attribute(alice, "key") is None

    def test_delete_attribute(self, dynamo_store, mock_table, alice):
        dynamo_store.delete_attribute(alice, "device_guard_device_otp")

        assert mock_table.delete_item.call_args[1]["Key"] == {
            "pk": "ACCOUNT#1001",
            "sk": "ATTR#device_guard_device_otp",
        }

    def test_options_use_global_partition(self, dynamo_store, mock_table):
        dynamo_store.set_option("device_guard_device_limit", 5)

        item = mock_table.put_item.call_args[1]["Item"]
        assert item["pk"] == "OPTION"
        assert item["sk"] == "OPTION#device_guard_device_limit"
        assert item["value"] == "5"

    def test_read_errors_return_none(self, dynamo_store, mock_table, alice):
        mock_table.get_item.side_effect = client_error("GetItem")
        mock_table.query.side_effect = client_error("Query")

        assert dynamo_store.get_attribute(alice, "key") is None
        assert dynamo_store.get_option("key") is None
        assert dynamo_store.get_by_name("alice") is None
        assert dynamo_store.get_by_id("1001") is None

    def test_write_errors_raise_storage_error(self, dynamo_store, mock_table, alice):
        mock_table.put_item.side_effect = client_error("PutItem")

        with pytest.raises(StorageError) as exc_info:
            dynamo_store.set_attribute(alice, "key", 1)

        assert exc_info.value.details["backend"] == "dynamodb"

    def test_delete_errors_raise_storage_error(self, dynamo_store, mock_table, alice):
        mock_table.delete_item.side_effect = client_error("DeleteItem")

        with pytest.raises(StorageError):
            dynamo_store.delete_attribute(alice, "key")

    def test_health_check(self, dynamo_store, mock_table):
        assert dynamo_store.health_check() is True

    def test_health_check_failure(self, dynamo_store, mock_table):
        type(mock_table).table_status = PropertyMock(side_effect=client_error("DescribeTable"))

        assert dynamo_store.health_check() is False
