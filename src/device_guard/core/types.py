"""Core types and enums."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional
from urllib.parse import urlencode


class DeviceClass(str, Enum):
    """Best-effort device classification captured at approval time."""
    MOBILE = "Mobile"
    DESKTOP = "Desktop"


class DeviceStatus(str, Enum):
    """Registry records are always terminal-approved."""
    APPROVED = "approved"


class ChallengeStatus(str, Enum):
    """A stored challenge is always pending; consumption deletes it."""
    PENDING = "pending"


class LoginAction(str, Enum):
    """What the host should do with a login attempt."""
    ALLOW = "allow"
    REDIRECT = "redirect"
    REJECT = "reject"


class RejectKind(str, Enum):
    """Typed login rejections surfaced to the host."""
    EMAIL_DELIVERY_FAILED = "email_delivery_failed"
    DEVICE_LIMIT_REACHED = "device_limit_reached"


class VerificationStatus(str, Enum):
    """Result states of the OTP verification flow."""
    INERT = "inert"        # unknown username, render nothing
    REDIRECT = "redirect"  # admitted, go to landing area
    FORM = "form"          # show the code form
    RETRY = "retry"        # show the code form with an error


@dataclass(frozen=True)
class ClientContext:
    """What the current request tells us about the client."""
    user_agent: str
    ip_address: str
    device_class: DeviceClass


@dataclass(frozen=True)
class LoginOutcome:
    """Decision handed back to the host authentication hook."""
    action: LoginAction
    target: Optional[str] = None
    query: Dict[str, str] = field(default_factory=dict)
    kind: Optional[RejectKind] = None
    message: Optional[str] = None

    @classmethod
    def allow(cls) -> "LoginOutcome":
        return cls(action=LoginAction.ALLOW)

    @classmethod
    def redirect(cls, target: str, query: Dict[str, str]) -> "LoginOutcome":
        return cls(action=LoginAction.REDIRECT, target=target, query=dict(query))

    @classmethod
    def reject(cls, kind: RejectKind, message: str) -> "LoginOutcome":
        return cls(action=LoginAction.REJECT, kind=kind, message=message)

    @property
    def is_allowed(self) -> bool:
        return self.action == LoginAction.ALLOW

    @property
    def url(self) -> Optional[str]:
        """Redirect target with its query string, for REDIRECT outcomes."""
        if self.target is None:
            return None
        if not self.query:
            return self.target
        return f"{self.target}?{urlencode(self.query)}"


@dataclass(frozen=True)
class VerificationOutcome:
    """Result of opening or submitting the verification page."""
    status: VerificationStatus
    redirect_to: Optional[str] = None
    error: Optional[str] = None
