"""Tests for provider configuration loading."""

import os
from unittest.mock import patch

import pytest

from blueprint_provider.config import (
    DEFAULT_API_TIMEOUT_SECONDS,
    DEFAULT_RESOURCE_MANAGER_URL,
    ConfigurationError,
    ProviderConfig,
)

TENANT_ID = "12345678-1234-1234-1234-123456789012"
CLIENT_ID = "87654321-4321-4321-4321-210987654321"


class TestProviderConfig:
    """Tests for ProviderConfig class."""

    def test_defaults(self) -> None:
        """Test an empty configuration is valid."""
        config = ProviderConfig()

        assert config.use_msi is False
        assert config.resource_manager_url == DEFAULT_RESOURCE_MANAGER_URL
        assert config.api_timeout_seconds == DEFAULT_API_TIMEOUT_SECONDS

    def test_invalid_guid(self) -> None:
        """Test that identifiers must be GUIDs."""
        with pytest.raises(ConfigurationError) as exc_info:
            ProviderConfig(tenant_id="contoso")

        assert "ARM_TENANT_ID" in str(exc_info.value)

    def test_uppercase_guid_accepted(self) -> None:
        """Test GUIDs are compared case-insensitively."""
        config = ProviderConfig(client_id=CLIENT_ID.upper())

        assert config.client_id == CLIENT_ID.upper()

    def test_http_endpoint_rejected(self) -> None:
        """Test the management endpoint must use https."""
        with pytest.raises(ConfigurationError) as exc_info:
            ProviderConfig(resource_manager_url="http://management.azure.com")

        assert "ARM_RESOURCE_MANAGER_URL" in str(exc_info.value)

    def test_invalid_timeout(self) -> None:
        """Test that out-of-range timeout raises error."""
        with pytest.raises(ConfigurationError) as exc_info:
            ProviderConfig(api_timeout_seconds=1)  # Too low

        assert "BLUEPRINT_API_TIMEOUT" in str(exc_info.value)

    def test_invalid_log_level(self) -> None:
        """Test that unknown log levels are rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            ProviderConfig(log_level="chatty")

        assert "AZBP_LOG_LEVEL" in str(exc_info.value)

    def test_errors_are_aggregated(self) -> None:
        """Test that all validation errors are reported together."""
        with pytest.raises(ConfigurationError) as exc_info:
            ProviderConfig(
                subscription_id="nope",
                resource_manager_url="ftp://example",
                api_timeout_seconds=10_000,
            )

        message = str(exc_info.value)
        assert message.startswith("Configuration validation failed:")
        assert "ARM_SUBSCRIPTION_ID" in message
        assert "ARM_RESOURCE_MANAGER_URL" in message
        assert "BLUEPRINT_API_TIMEOUT" in message

    def test_from_env(self) -> None:
        """Test loading configuration from environment variables."""
        env = {
            "ARM_TENANT_ID": TENANT_ID,
            "ARM_CLIENT_ID": CLIENT_ID,
            "ARM_USE_MSI": "true",
            "ARM_RESOURCE_MANAGER_URL": "https://management.usgovcloudapi.net",
            "BLUEPRINT_API_TIMEOUT": "60",
            "AZBP_LOG_LEVEL": "debug",
        }

        with patch.dict(os.environ, env, clear=True):
            config = ProviderConfig.from_env()

        assert config.tenant_id == TENANT_ID
        assert config.client_id == CLIENT_ID
        assert config.subscription_id is None
        assert config.use_msi is True
        assert config.resource_manager_url == "https://management.usgovcloudapi.net"
        assert config.api_timeout_seconds == 60
        assert config.log_level == "debug"

    def test_from_env_defaults(self) -> None:
        """Test defaults apply when nothing is set."""
        with patch.dict(os.environ, {}, clear=True):
            config = ProviderConfig.from_env()

        assert config == ProviderConfig()

    def test_from_env_non_integer_timeout(self) -> None:
        """Test a non-integer timeout is a configuration error."""
        with patch.dict(os.environ, {"BLUEPRINT_API_TIMEOUT": "soon"}, clear=True):
            with pytest.raises(ConfigurationError, match="must be an integer"):
                ProviderConfig.from_env()

    @pytest.mark.parametrize("value", ["false", "0", "no"])
    def test_from_env_use_msi_false(self, value: str) -> None:
        """Test values other than true/1/yes disable managed identity."""
        with patch.dict(os.environ, {"ARM_USE_MSI": value}, clear=True):
            config = ProviderConfig.from_env()

        assert config.use_msi is False
