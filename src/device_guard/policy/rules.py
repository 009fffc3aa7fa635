"""Policy rules - YAML-backed defaults for device limits, routes and tokens."""

from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from device_guard.common.constants import (
    DeviceConstants,
    FormTokenConstants,
    RouteConstants,
)
from device_guard.common.exceptions import ConfigurationError


class PolicyMetadata(BaseModel):
    version: str = Field(default="1.0.0")
    description: str = Field(default="")


class DevicePolicy(BaseModel):
    default_limit: int = Field(default=DeviceConstants.DEFAULT_DEVICE_LIMIT, ge=1)


class RoutePolicy(BaseModel):
    verify_path: str = Field(default=RouteConstants.VERIFY_PATH)
    landing_path: str = Field(default=RouteConstants.LANDING_PATH)


class ClientTokenPolicy(BaseModel):
    name: str = Field(default=DeviceConstants.CLIENT_TOKEN_NAME, min_length=1)
    max_age_days: int = Field(default=DeviceConstants.CLIENT_TOKEN_MAX_AGE_DAYS, ge=1)


class FormPolicy(BaseModel):
    token_ttl_hours: int = Field(default=FormTokenConstants.TTL_HOURS, ge=1)


class DevicePolicyRules(BaseModel):
    """Validated contents of device_policy.yaml."""
    metadata: PolicyMetadata = Field(default_factory=PolicyMetadata)
    devices: DevicePolicy = Field(default_factory=DevicePolicy)
    routes: RoutePolicy = Field(default_factory=RoutePolicy)
    client_token: ClientTokenPolicy = Field(default_factory=ClientTokenPolicy)
    forms: FormPolicy = Field(default_factory=FormPolicy)


def load_policy_rules(policy_file: Optional[Union[str, Path]] = None) -> DevicePolicyRules:
    """Load and validate policy rules.

    Args:
        policy_file: Path to a YAML policy file. Built-in defaults are used
            when no path is given.

    Raises:
        ConfigurationError: If the file is missing or does not validate
    """
    if policy_file is None:
        return DevicePolicyRules()

    path = Path(policy_file)
    if not path.exists():
        raise ConfigurationError(
            f"Policy file not found: {path}", details={"policy_file": str(path)}
        )

    with open(path, "r") as f:
        raw_config = yaml.safe_load(f) or {}

    try:
        return DevicePolicyRules.model_validate(raw_config)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid policy file: {path}",
            details={"policy_file": str(path), "errors": e.error_count()},
        ) from e
