"""Credential acquisition and security audit logging.

Two authentication modes are supported:
- Managed identity only (ARM_USE_MSI=true), optionally user-assigned
- The default Azure credential chain (environment, workload identity,
  managed identity, Azure CLI)

Every write or delete against the Blueprint API is recorded as a structured
audit event.
"""

from __future__ import annotations

import logging

from azure.core.credentials import TokenCredential
from azure.identity import DefaultAzureCredential, ManagedIdentityCredential

from .config import ProviderConfig

logger = logging.getLogger(__name__)


def _redact(client_id: str) -> str:
    return client_id[:8] + "..." if len(client_id) > 8 else client_id


def get_credential(config: ProviderConfig) -> TokenCredential:
    """Build the credential used for Blueprint API calls.

    Args:
        config: Validated provider configuration.

    Returns:
        ManagedIdentityCredential when managed identity is requested,
        DefaultAzureCredential otherwise.
    """
    if config.use_msi:
        if config.client_id:
            logger.info(
                "Using user-assigned managed identity",
                extra={"client_id": _redact(config.client_id)},
            )
            return ManagedIdentityCredential(client_id=config.client_id)

        logger.info("Using system-assigned managed identity")
        return ManagedIdentityCredential()

    kwargs: dict[str, str] = {}
    if config.client_id:
        kwargs["managed_identity_client_id"] = config.client_id

    logger.info(
        "Using default Azure credential chain",
        extra={"tenant_id": config.tenant_id},
    )
    return DefaultAzureCredential(**kwargs)


def log_security_audit_event(
    event_type: str,
    resource_type: str,
    target_resource: str | None = None,
    action: str | None = None,
    result: str | None = None,
) -> None:
    """Log a security-relevant audit event.

    Args:
        event_type: Type of security event (write, delete, publish).
        resource_type: Provider resource type (e.g. "azure_blueprint").
        target_resource: Blueprint or artifact being changed.
        action: Action being performed.
        result: Result of the action (success, failure).
    """
    logger.info(
        f"Security audit: {event_type}",
        extra={
            "security_audit": True,
            "event_type": event_type,
            "resource_type": resource_type,
            "target_resource": target_resource,
            "action": action,
            "result": result,
        },
    )
