"""Security helpers."""

from device_guard.security.form_tokens import FormTokenSigner

__all__ = ["FormTokenSigner"]
