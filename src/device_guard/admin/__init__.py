"""Admin operations."""

from device_guard.admin.service import AdminActionResult, DeviceAdminService

__all__ = ["AdminActionResult", "DeviceAdminService"]
