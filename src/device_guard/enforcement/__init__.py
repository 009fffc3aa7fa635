"""Enforcement - login state machine, code verification and bootstrap."""

from device_guard.enforcement.bootstrap import BootstrapApprover
from device_guard.enforcement.engine import LoginEnforcementEngine
from device_guard.enforcement.verification import OTPVerificationFlow, SessionHost

__all__ = [
    "BootstrapApprover",
    "LoginEnforcementEngine",
    "OTPVerificationFlow",
    "SessionHost",
]
