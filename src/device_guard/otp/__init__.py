"""OTP challenges."""

from device_guard.otp.challenge import OTPChallengeManager, generate_code

__all__ = ["OTPChallengeManager", "generate_code"]
