"""OTP challenge schema - canonical definition."""

from datetime import datetime

from pydantic import BaseModel, Field

from device_guard.common.constants import OTPConstants
from device_guard.core.types import ChallengeStatus, DeviceClass


class OTPChallenge(BaseModel):
    """The single pending OTP challenge of an account.

    The client details are captured when the challenge is issued and copied
    into the DeviceRecord when the code is verified.
    """
    code: int = Field(..., ge=OTPConstants.CODE_MIN, le=OTPConstants.CODE_MAX)
    claiming_device_id: str = Field(..., min_length=1, description="Device that triggered the challenge")
    agent: str = Field(default="unknown")
    ip_address: str = Field(default="unknown")
    device_class: DeviceClass = Field(default=DeviceClass.DESKTOP)
    created_at: datetime = Field(..., description="When the code was issued")
    status: ChallengeStatus = Field(default=ChallengeStatus.PENDING)

    model_config = {"frozen": True}
