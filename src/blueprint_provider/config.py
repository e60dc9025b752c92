"""Provider configuration with validation.

Configuration is read once from the environment, validated at construction
and then passed explicitly to the client and lifecycle operations.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    pass


DEFAULT_RESOURCE_MANAGER_URL = "https://management.azure.com"

# API call bounds (seconds)
DEFAULT_API_TIMEOUT_SECONDS = 120
MIN_API_TIMEOUT_SECONDS = 5
MAX_API_TIMEOUT_SECONDS = 900

# Manifest limits
MAX_MANIFEST_FILE_SIZE_BYTES = 1024 * 1024  # 1MB max manifest
MAX_BLUEPRINT_NAME_LENGTH = 48
MAX_ARTIFACT_NAME_LENGTH = 48

VALID_GUID_PATTERN = r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ProviderConfig:
    """Provider configuration loaded from environment variables.

    All identifiers are optional: blueprints are addressed by scope, so no
    subscription is needed to build the client. When given, they must be GUIDs.
    """

    tenant_id: str | None = None
    client_id: str | None = None
    subscription_id: str | None = None

    # Authentication
    use_msi: bool = False

    # Endpoint and timing
    resource_manager_url: str = DEFAULT_RESOURCE_MANAGER_URL
    api_timeout_seconds: int = DEFAULT_API_TIMEOUT_SECONDS

    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        errors: list[str] = []

        for env_name, value in (
            ("ARM_TENANT_ID", self.tenant_id),
            ("ARM_CLIENT_ID", self.client_id),
            ("ARM_SUBSCRIPTION_ID", self.subscription_id),
        ):
            if value and not re.match(VALID_GUID_PATTERN, value.lower()):
                errors.append(f"{env_name} must be a valid GUID: {value}")

        if not self.resource_manager_url.startswith("https://"):
            errors.append(
                f"ARM_RESOURCE_MANAGER_URL must use https: {self.resource_manager_url}"
            )

        if not (
            MIN_API_TIMEOUT_SECONDS <= self.api_timeout_seconds <= MAX_API_TIMEOUT_SECONDS
        ):
            errors.append(
                f"BLUEPRINT_API_TIMEOUT must be between {MIN_API_TIMEOUT_SECONDS} "
                f"and {MAX_API_TIMEOUT_SECONDS} seconds"
            )

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(f"AZBP_LOG_LEVEL must be one of {list(VALID_LOG_LEVELS)}: {self.log_level}")

        if errors:
            error_msg = "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            raise ConfigurationError(error_msg)

    @classmethod
    def from_env(cls) -> ProviderConfig:
        """Load configuration from environment variables.

        Environment Variables:
            ARM_TENANT_ID: Entra ID tenant (optional)
            ARM_CLIENT_ID: Client ID of a user-assigned managed identity (optional)
            ARM_SUBSCRIPTION_ID: Default subscription (optional, informational)
            ARM_USE_MSI: If "true", authenticate with managed identity only
            ARM_RESOURCE_MANAGER_URL: Management endpoint (default: public cloud)
            BLUEPRINT_API_TIMEOUT: Read timeout for API calls in seconds (default: 120)
            AZBP_LOG_LEVEL: Root log level (default: INFO)
        """

        def get_int(key: str, default: int) -> int:
            value = os.environ.get(key)
            if value is None:
                return default
            try:
                return int(value)
            except ValueError as e:
                raise ConfigurationError(f"{key} must be an integer: {value}") from e

        def get_bool(key: str, default: bool) -> bool:
            value = os.environ.get(key, "").lower()
            if not value:
                return default
            return value in ("true", "1", "yes")

        return cls(
            tenant_id=os.environ.get("ARM_TENANT_ID") or None,
            client_id=os.environ.get("ARM_CLIENT_ID") or None,
            subscription_id=os.environ.get("ARM_SUBSCRIPTION_ID") or None,
            use_msi=get_bool("ARM_USE_MSI", False),
            resource_manager_url=os.environ.get(
                "ARM_RESOURCE_MANAGER_URL", DEFAULT_RESOURCE_MANAGER_URL
            ),
            api_timeout_seconds=get_int("BLUEPRINT_API_TIMEOUT", DEFAULT_API_TIMEOUT_SECONDS),
            log_level=os.environ.get("AZBP_LOG_LEVEL", "INFO"),
        )
