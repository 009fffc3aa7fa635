"""API Schemas - Request/Response models for the API Gateway.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class EnforceLoginRequest(BaseModel):
    """Request body for POST /login/enforce.

    Sent by the host after it has verified the password.
    """
    username: str = Field(..., min_length=1, description="Login name the user signed in with")

    model_config = {
        "json_schema_extra": {"example": {"username": "alice"}}
    }


class VerifyDeviceRequest(BaseModel):
    """Request body for POST /verify-device."""
    log: str = Field(..., description="Username from the redirect query")
    code: str = Field(..., max_length=32, description="Six-digit code from the email")
    form_token: Optional[str] = Field(default=None, description="Forgery-prevention token")


class DeleteDeviceRequest(BaseModel):
    """Request body for POST /admin/devices/delete."""
    account_id: Optional[str] = Field(default=None)
    device_id: Optional[str] = Field(default=None)
    form_token: Optional[str] = Field(default=None)


class ResetDevicesRequest(BaseModel):
    form_token: Optional[str] = Field(default=None)


class UpdateSettingsRequest(BaseModel):
    """Request body for PUT /admin/settings."""
    device_limit: int = Field(..., description="Maximum approved devices per account")
    form_token: Optional[str] = Field(default=None)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class LoginOutcomeResponse(BaseModel):
    """Response for POST /login/enforce."""
    outcome: Literal["allow", "redirect", "reject"] = Field(
        ..., description="What the host should do with the login"
    )
    redirect_to: Optional[str] = Field(
        default=None, description="Verification URL for redirect outcomes"
    )
    error: Optional[Literal["email_delivery_failed", "device_limit_reached"]] = Field(
        default=None, description="Rejection kind"
    )
    message: Optional[str] = Field(default=None, description="Message to show the user")

    model_config = {
        "json_schema_extra": {
            "example": {
                "outcome": "redirect",
                "redirect_to": "/verify-device?log=alice",
                "error": None,
                "message": None,
            }
        }
    }


class VerifyDeviceResponse(BaseModel):
    """Response for GET and POST /verify-device."""
    status: Literal["inert", "redirect", "form", "retry"]
    redirect_to: Optional[str] = None
    form_token: Optional[str] = None
    error: Optional[str] = None
    session_established: bool = False


class DeviceResponse(BaseModel):
    id: str
    agent: str
    approved_at: datetime
    ip_address: str
    device_class: str
    status: str


class DeviceListResponse(BaseModel):
    account_id: str
    devices: List[DeviceResponse]


class AdminMessage(BaseModel):
    message: str


class AdminResponse(BaseModel):
    """Envelope of admin mutations: {"success": ..., "data": {"message": ...}}."""
    success: bool
    data: AdminMessage


class FormTokenResponse(BaseModel):
    action: str
    form_token: str


class SettingsResponse(BaseModel):
    device_limit: int


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human-readable error message")
    request_id: Optional[str] = Field(
        default=None, description="Request ID for debugging"
    )
