"""Account schema - read-only view of an account in the external store."""

from pydantic import BaseModel, Field


class Account(BaseModel):
    """Account reference handed out by an AccountStore.

    The core never manages account identity; it only reads these fields.
    """
    account_id: str = Field(..., description="Stable account identifier")
    username: str = Field(..., description="Login name")
    email: str = Field(..., description="Registered address that receives OTP codes")
    display_name: str = Field(default="", description="Name used in the OTP email greeting")
    is_admin: bool = Field(default=False, description="May manage other accounts' devices")

    model_config = {"frozen": True}

    @property
    def greeting_name(self) -> str:
        return self.display_name or self.username
