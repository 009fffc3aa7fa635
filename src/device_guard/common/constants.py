"""Centralized constants for Device Guard."""

from datetime import timedelta


# ===== STORAGE KEYS =====
class StorageKeys:
    ALLOWED_DEVICES = "device_guard_allowed_devices"  # per account
    DEVICE_OTP = "device_guard_device_otp"            # per account, single slot
    DEVICE_LIMIT = "device_guard_device_limit"        # global option
    BOOTSTRAP_COMPLETED = "device_guard_bootstrap_completed"  # global option


# ===== OTP CHALLENGE =====
class OTPConstants:
    CODE_MIN = 100000
    CODE_MAX = 999999
    TTL = timedelta(minutes=10)


# ===== DEVICES & POLICY =====
class DeviceConstants:
    DEFAULT_DEVICE_LIMIT = 3
    UNKNOWN = "unknown"
    TOKEN_RANDOM_BYTES = 32  # 256-bit
    CLIENT_TOKEN_NAME = "device_guard_device_id"
    CLIENT_TOKEN_MAX_AGE_DAYS = 365


# ===== ROUTES =====
class RouteConstants:
    VERIFY_PATH = "/verify-device"
    LANDING_PATH = "/"
    USERNAME_QUERY_PARAM = "log"


# ===== FORM TOKENS =====
class FormTokenConstants:
    TTL_HOURS = 12
    VERIFY_OTP_ACTION = "verify_otp"
    DELETE_DEVICE_ACTION = "delete_device"
    RESET_DEVICES_ACTION = "reset_devices"
    UPDATE_SETTINGS_ACTION = "update_settings"


# ===== MESSAGES =====
class Messages:
    EMAIL_DELIVERY_FAILED = (
        "We could not send the verification email at this time. "
        "Please configure your mail server or contact the site administrator."
    )
    DEVICE_LIMIT_REACHED = "Device limit reached. Contact administrator."
    INVALID_OR_EXPIRED_CODE = "Invalid or expired code."
    DEVICE_DELETED = "Device deleted successfully"
    DEVICES_RESET = "Devices reset successfully"
    SETTINGS_SAVED = "Settings saved"
    MISSING_DATA = "Missing data"
    NO_DEVICES_FOUND = "No devices found"
