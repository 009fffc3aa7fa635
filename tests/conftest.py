"""Shared fixtures for Device Guard tests."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from device_guard.api.service import DeviceGuardService
from device_guard.common.config import Config
from device_guard.core.types import ClientContext, DeviceClass
from device_guard.data.schemas import Account, DeviceRecord
from device_guard.mail.base import MailService
from device_guard.policy.rules import DevicePolicyRules
from device_guard.storage.memory import InMemoryAccountStore

TEST_SECRET = "test-secret-key"

DESKTOP_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)
MOBILE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def alice() -> Account:
    return Account(
        account_id="1001",
        username="alice",
        email="alice@example.com",
        display_name="Alice",
    )


@pytest.fixture
def admin() -> Account:
    return Account(
        account_id="1",
        username="admin",
        email="admin@example.com",
        display_name="Site Admin",
        is_admin=True,
    )


@pytest.fixture
def store(alice, admin) -> InMemoryAccountStore:
    store = InMemoryAccountStore()
    store.add_account(alice)
    store.add_account(admin)
    return store


@pytest.fixture
def mailer() -> MagicMock:
    """Mail backend that accepts every message."""
    mailer = MagicMock(spec=MailService)
    mailer.send.return_value = True
    return mailer


@pytest.fixture
def rules() -> DevicePolicyRules:
    return DevicePolicyRules()


@pytest.fixture
def config() -> Config:
    return Config(secret_key=TEST_SECRET)


@pytest.fixture
def service(store, mailer, rules, config) -> DeviceGuardService:
    return DeviceGuardService(store=store, mailer=mailer, rules=rules, config=config)


@pytest.fixture
def desktop_client() -> ClientContext:
    return ClientContext(
        user_agent=DESKTOP_UA,
        ip_address="192.168.1.100",
        device_class=DeviceClass.DESKTOP,
    )


@pytest.fixture
def make_record():
    """Factory for approved desktop device records."""
    def _make(device_id: str, approved_at: datetime, ip_address: str = "10.0.0.1") -> DeviceRecord:
        return DeviceRecord(
            id=device_id,
            agent=DESKTOP_UA,
            approved_at=approved_at,
            ip_address=ip_address,
            device_class=DeviceClass.DESKTOP,
        )
    return _make


@pytest.fixture
def sent_code(mailer):
    """Returns the six-digit code from the last message handed to the mailer."""
    def _code() -> str:
        _, _, body = mailer.send.call_args[0]
        for line in body.splitlines():
            if line.startswith("Your verification code is: "):
                return line.rsplit(" ", 1)[1]
        raise AssertionError("no verification code in mail body")
    return _code
