"""Plain-text mail templates."""

from typing import Tuple

NEW_DEVICE_SUBJECT = "Verify New Device Login"

NEW_DEVICE_BODY = (
    "Hello {name},\n\n"
    "Your verification code is: {code}\n\n"
    "This code will expire shortly.\n\n"
    "If you did not request this login, please ignore this email."
)

CHECK_SUBJECT = "Device Guard: Test Email"

CHECK_BODY = "This is a test email to verify that your mail settings are working correctly."


def new_device_code_message(display_name: str, code: int) -> Tuple[str, str]:
    """Subject and body of the OTP email for a new device."""
    return NEW_DEVICE_SUBJECT, NEW_DEVICE_BODY.format(name=display_name, code=code)


def mail_check_message() -> Tuple[str, str]:
    return CHECK_SUBJECT, CHECK_BODY
