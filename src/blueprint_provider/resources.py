"""Resource lifecycle operations.

Each resource type maps its desired state onto the Blueprint API and reads
the result back into state:

    create_or_update(spec) -> state     write, then read back
    read(identity)         -> state     None when the resource is gone
    delete(identity)       -> None

The API client is passed in explicitly; nothing here holds global state.
"""

from __future__ import annotations

import logging

from .client import BlueprintApiError, BlueprintClient
from .models import (
    ArtifactKind,
    ArtifactState,
    BaseArtifactSpec,
    BlueprintSpec,
    BlueprintState,
    artifact_address,
    blueprint_address,
)
from .scope import ensure_valid_scope
from .security import log_security_audit_event

logger = logging.getLogger(__name__)

SUPPORTED_KINDS = frozenset(kind.value for kind in ArtifactKind)


class ArtifactKindMismatchError(Exception):
    """Raised when an artifact read back has an unexpected kind."""

    pass


class BlueprintResource:
    """Lifecycle of a blueprint definition."""

    resource_type = "azure_blueprint"

    def __init__(self, client: BlueprintClient) -> None:
        self._client = client

    def create_or_update(self, spec: BlueprintSpec) -> BlueprintState:
        """Create or update a blueprint and return its state.

        Raises:
            BlueprintApiError: If the write or the read-back fails.
        """
        try:
            self._client.create_or_update_blueprint(spec.scope, spec.name, spec.to_azure_payload())
        except BlueprintApiError:
            log_security_audit_event(
                "write", self.resource_type, spec.address, "create_or_update", "failure"
            )
            raise

        log_security_audit_event(
            "write", self.resource_type, spec.address, "create_or_update", "success"
        )

        state = self.read(spec.scope, spec.name)
        if state is None:
            raise BlueprintApiError(
                f"Blueprint {spec.name!r} in scope {spec.scope!r} was not found after write"
            )
        return state

    def read(self, scope: str, name: str) -> BlueprintState | None:
        """Read a blueprint. Returns None if it no longer exists."""
        ensure_valid_scope(scope)
        data = self._client.get_blueprint(scope, name)
        if data is None:
            logger.debug(
                "Blueprint was not found",
                extra={"blueprint": name, "scope": scope},
            )
            return None
        return BlueprintState.from_azure(scope, data)

    def delete(self, scope: str, name: str) -> None:
        """Delete a blueprint definition."""
        ensure_valid_scope(scope)
        self._client.delete_blueprint(scope, name)
        log_security_audit_event(
            "delete", self.resource_type, blueprint_address(scope, name), "delete", "success"
        )

    def publish(self, scope: str, name: str, version: str) -> str:
        """Publish the blueprint as ``version``.

        Returns:
            Resource ID of the published version (empty if not returned).
        """
        if not version or not version.strip():
            raise ValueError("version must not be empty")
        ensure_valid_scope(scope)
        data = self._client.publish_blueprint(scope, name, version)
        log_security_audit_event(
            "publish",
            self.resource_type,
            blueprint_address(scope, name),
            f"publish:{version}",
            "success",
        )
        return data.get("id", "")


class ArtifactResource:
    """Lifecycle of a blueprint artifact of any kind."""

    resource_type = "azure_blueprint_artifact"

    # When set, read() rejects artifacts of any other kind
    expected_kind: ArtifactKind | None = None

    def __init__(self, client: BlueprintClient) -> None:
        self._client = client

    def create_or_update(self, spec: BaseArtifactSpec) -> ArtifactState:
        """Create or update an artifact and return its state.

        Raises:
            ValueError: If the spec has no resolved scope.
            BlueprintApiError: If the write or the read-back fails.
        """
        scope = spec.resolved_scope

        try:
            self._client.create_or_update_artifact(
                scope, spec.blueprint_name, spec.name, spec.to_azure_payload()
            )
        except BlueprintApiError:
            log_security_audit_event(
                "write", self.resource_type, spec.address, "create_or_update", "failure"
            )
            raise

        log_security_audit_event(
            "write", self.resource_type, spec.address, "create_or_update", "success"
        )

        state = self.read(scope, spec.blueprint_name, spec.name)
        if state is None:
            raise BlueprintApiError(
                f"Artifact {spec.name!r} in blueprint {spec.blueprint_name!r} "
                f"was not found after write"
            )
        return state

    def read(self, scope: str, blueprint_name: str, name: str) -> ArtifactState | None:
        """Read an artifact. Returns None if it no longer exists.

        Raises:
            ArtifactKindMismatchError: If the artifact kind is unsupported or
                differs from ``expected_kind``.
        """
        ensure_valid_scope(scope)
        data = self._client.get_artifact(scope, blueprint_name, name)
        if data is None:
            logger.debug(
                "Artifact was not found",
                extra={"artifact": name, "blueprint": blueprint_name, "scope": scope},
            )
            return None

        kind = data.get("kind")
        if self.expected_kind is not None and kind != self.expected_kind.value:
            raise ArtifactKindMismatchError(
                f"Artifact kind expected to be {self.expected_kind.value!r}, got {kind!r}"
            )

        if kind not in SUPPORTED_KINDS:
            raise ArtifactKindMismatchError(f"Unsupported artifact kind {kind!r}")

        return ArtifactState.from_azure(scope, blueprint_name, data)

    def delete(self, scope: str, blueprint_name: str, name: str) -> None:
        """Delete an artifact from its blueprint."""
        ensure_valid_scope(scope)
        self._client.delete_artifact(scope, blueprint_name, name)
        log_security_audit_event(
            "delete",
            self.resource_type,
            artifact_address(scope, blueprint_name, name),
            "delete",
            "success",
        )


class PolicyAssignmentArtifactResource(ArtifactResource):
    """Lifecycle of a policy assignment artifact."""

    resource_type = "azure_blueprint_policy_assignment_artifact"
    expected_kind = ArtifactKind.POLICY_ASSIGNMENT
