"""Core types."""

from device_guard.core.types import (
    ChallengeStatus,
    ClientContext,
    DeviceClass,
    DeviceStatus,
    LoginAction,
    LoginOutcome,
    RejectKind,
    VerificationOutcome,
    VerificationStatus,
)

__all__ = [
    "ChallengeStatus",
    "ClientContext",
    "DeviceClass",
    "DeviceStatus",
    "LoginAction",
    "LoginOutcome",
    "RejectKind",
    "VerificationOutcome",
    "VerificationStatus",
]
