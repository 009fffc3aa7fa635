"""Device Identity Resolver - stable per-browser device fingerprints.

The fingerprint lives in a long-lived client token (a cookie). A client that
already presents a token is identified by it, across accounts and sessions;
only a client without one gets a freshly generated id.
"""

import hashlib
import logging
import re
import secrets
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Optional

from device_guard.common.constants import DeviceConstants
from device_guard.common.exceptions import TokenPersistError

logger = logging.getLogger(__name__)

_TAGS = re.compile(r"<[^>]*>")
_OCTETS = re.compile(r"%[a-fA-F0-9]{2}")
_CONTROL = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(value: Optional[str]) -> str:
    """Strip tags, percent-encoded octets and control characters; collapse whitespace."""
    if not value:
        return ""
    cleaned = _TAGS.sub("", value)
    cleaned = _OCTETS.sub("", cleaned)
    cleaned = _CONTROL.sub(" ", cleaned)
    return _WHITESPACE.sub(" ", cleaned).strip()


class ClientTokenStore(ABC):
    """Access to the opaque token persisted on the client."""

    @abstractmethod
    def get(self) -> Optional[str]:
        """Current token value, or None if the client sent none."""
        pass

    @abstractmethod
    def set(self, value: str, max_age: timedelta) -> None:
        """Persist a token on the client.

        Raises:
            TokenPersistError: If the token cannot be set
        """
        pass


class InMemoryTokenStore(ClientTokenStore):
    """Token store without a browser behind it (CLI, tests)."""

    def __init__(self, value: Optional[str] = None):
        self.value = value
        self.max_age: Optional[timedelta] = None

    def get(self) -> Optional[str]:
        return self.value

    def set(self, value: str, max_age: timedelta) -> None:
        self.value = value
        self.max_age = max_age


class DeviceIdentityResolver:
    """Derives and persists the device id of the current client."""

    def __init__(self, token_max_age: timedelta = timedelta(days=DeviceConstants.CLIENT_TOKEN_MAX_AGE_DAYS)):
        self.token_max_age = token_max_age

    def current(self, token_store: ClientTokenStore) -> Optional[str]:
        """Device id presented by the client, without generating one."""
        value = normalize_text(token_store.get())
        return value or None

    def resolve(self, token_store: ClientTokenStore, user_agent: Optional[str]) -> str:
        """Device id of the client, generating and persisting one if needed.

        Args:
            token_store: The client's token store
            user_agent: Client-declared software identifier

        Returns:
            A non-empty device id. If the new token cannot be persisted the
            id is still returned; the client will simply not be recognized
            next time.
        """
        existing = self.current(token_store)
        if existing:
            return existing

        device_id = self.generate(user_agent)
        try:
            token_store.set(device_id, self.token_max_age)
        except TokenPersistError as e:
            logger.warning(f"Could not persist device token: {e.message}")
        else:
            logger.debug("New device token issued")
        return device_id

    @staticmethod
    def generate(user_agent: Optional[str]) -> str:
        """Random 256-bit value combined with the User-Agent, hashed to 64 hex chars."""
        seed = secrets.token_hex(DeviceConstants.TOKEN_RANDOM_BYTES)
        agent = normalize_text(user_agent) or DeviceConstants.UNKNOWN
        return hashlib.sha256(f"{seed}{agent}".encode("utf-8")).hexdigest()
