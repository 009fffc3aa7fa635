"""API - host hook, verification page and admin endpoints.

Host-facing:
    POST /login/enforce
    GET/POST /verify-device

Admin:
    /admin/form-token, /admin/accounts/{account_id}/devices,
    /admin/devices/delete, /admin/accounts/{account_id}/reset-devices,
    /admin/settings
"""

from device_guard.api.gateway import app
from device_guard.api.schemas import (
    AdminResponse,
    EnforceLoginRequest,
    ErrorResponse,
    LoginOutcomeResponse,
    VerifyDeviceResponse,
)
from device_guard.api.service import DeviceGuardService

__all__ = [
    "app",
    "AdminResponse",
    "EnforceLoginRequest",
    "ErrorResponse",
    "LoginOutcomeResponse",
    "VerifyDeviceResponse",
    "DeviceGuardService",
]
