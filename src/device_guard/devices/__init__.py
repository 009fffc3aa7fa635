"""Devices - identity resolution, classification and the approved-device registry."""

from device_guard.devices.classifier import classify_user_agent
from device_guard.devices.identity import (
    ClientTokenStore,
    DeviceIdentityResolver,
    InMemoryTokenStore,
    normalize_text,
)
from device_guard.devices.registry import DeviceRegistry

__all__ = [
    "ClientTokenStore",
    "DeviceIdentityResolver",
    "DeviceRegistry",
    "InMemoryTokenStore",
    "classify_user_agent",
    "normalize_text",
]
