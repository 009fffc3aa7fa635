"""Device record schema - canonical definition."""

from datetime import datetime

from pydantic import BaseModel, Field

from device_guard.core.types import DeviceClass, DeviceStatus


class DeviceRecord(BaseModel):
    """An approved device in an account's allow-list.

    Immutable once approved. `id` is the opaque device fingerprint held by
    the browser's client token.
    """
    id: str = Field(..., min_length=1, description="Device fingerprint")
    agent: str = Field(default="unknown", description="Client-declared User-Agent, display only")
    approved_at: datetime = Field(..., description="When the device was approved")
    ip_address: str = Field(default="unknown", description="Best-effort client IP")
    device_class: DeviceClass = Field(default=DeviceClass.DESKTOP, description="Mobile or Desktop")
    status: DeviceStatus = Field(default=DeviceStatus.APPROVED)

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "id": "3f0a9c1e7d...",
                "agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120.0",
                "approved_at": "2026-01-28T14:30:05Z",
                "ip_address": "192.168.1.100",
                "device_class": "Desktop",
                "status": "approved",
            }
        },
    }
