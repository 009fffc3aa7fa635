"""Best-effort Mobile/Desktop classification from the User-Agent."""

from typing import Optional

from device_guard.core.types import DeviceClass

# Substrings that mark a handheld browser.
MOBILE_MARKERS = (
    "Mobile",
    "Android",
    "Silk/",
    "Kindle",
    "BlackBerry",
    "Opera Mini",
    "Opera Mobi",
)


def classify_user_agent(user_agent: Optional[str]) -> DeviceClass:
    if user_agent and any(marker in user_agent for marker in MOBILE_MARKERS):
        return DeviceClass.MOBILE
    return DeviceClass.DESKTOP
