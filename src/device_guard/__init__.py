"""Device Guard - per-account device allow-list with OTP-gated login."""

__version__ = "1.0.0"
