"""Data schemas - canonical Pydantic definitions."""

from device_guard.data.schemas.account import Account
from device_guard.data.schemas.challenge import OTPChallenge
from device_guard.data.schemas.device import DeviceRecord

__all__ = [
    "Account",
    "DeviceRecord",
    "OTPChallenge",
]
