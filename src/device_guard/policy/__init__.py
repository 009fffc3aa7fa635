"""Policy - device limit and route defaults."""

from device_guard.policy.rules import DevicePolicyRules, load_policy_rules
from device_guard.policy.settings import DevicePolicyService, sanitize_limit

__all__ = [
    "DevicePolicyRules",
    "DevicePolicyService",
    "load_policy_rules",
    "sanitize_limit",
]
