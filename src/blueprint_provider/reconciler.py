"""Plan, apply and destroy a blueprint manifest.

ORDERING:
- apply: blueprints first, then their artifacts (an artifact needs its
  blueprint to exist). Artifacts of a blueprint that failed are skipped.
- destroy: artifacts first, then blueprints.

A failure on one resource is recorded in the result and does not stop the
remaining resources.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from .client import BlueprintApiError, BlueprintClient
from .diff import FieldChange, diff_payloads
from .models import (
    BaseArtifactSpec,
    BlueprintManifest,
    BlueprintSpec,
    PolicyAssignmentArtifactSpec,
)
from .resources import (
    ArtifactKindMismatchError,
    ArtifactResource,
    BlueprintResource,
    PolicyAssignmentArtifactResource,
)

logger = logging.getLogger(__name__)

# Per-resource errors recorded in the result instead of aborting the run.
# ValueError covers scope errors and responses that cannot be flattened.
RESOURCE_ERRORS = (BlueprintApiError, ArtifactKindMismatchError, ValueError)


class ChangeAction(str, Enum):
    """What a run does to one resource."""

    CREATE = "create"
    UPDATE = "update"
    NO_OP = "no-op"
    DELETE = "delete"


@dataclass
class PlannedChange:
    """Planned or applied action for a single resource."""

    address: str
    action: ChangeAction
    changes: list[FieldChange] = field(default_factory=list)


@dataclass
class ResourceFailure:
    """A resource whose operation failed."""

    address: str
    error: str


@dataclass
class ReconcileResult:
    """Result of a plan, apply or destroy run."""

    operation: str
    started_at: datetime
    completed_at: datetime | None = None
    changes: list[PlannedChange] = field(default_factory=list)
    published: list[str] = field(default_factory=list)
    failures: list[ResourceFailure] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        """Calculate run duration."""
        if self.completed_at is None:
            return 0.0
        return (self.completed_at - self.started_at).total_seconds()

    @property
    def success(self) -> bool:
        return not self.failures

    def count(self, action: ChangeAction) -> int:
        return sum(1 for change in self.changes if change.action == action)

    def summary(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "create": self.count(ChangeAction.CREATE),
            "update": self.count(ChangeAction.UPDATE),
            "no_op": self.count(ChangeAction.NO_OP),
            "delete": self.count(ChangeAction.DELETE),
            "published": len(self.published),
            "failed": len(self.failures),
            "duration_seconds": self.duration_seconds,
        }


def plan_change(
    address: str, desired: dict[str, Any], current: dict[str, Any] | None
) -> PlannedChange:
    """Classify one resource as create, update or no-op."""
    if current is None:
        return PlannedChange(address=address, action=ChangeAction.CREATE)

    changes = diff_payloads(desired, current)
    if changes:
        return PlannedChange(address=address, action=ChangeAction.UPDATE, changes=changes)
    return PlannedChange(address=address, action=ChangeAction.NO_OP)


class Reconciler:
    """Drives the resource lifecycles over a whole manifest."""

    def __init__(self, client: BlueprintClient) -> None:
        self._blueprints = BlueprintResource(client)
        self._artifacts = ArtifactResource(client)
        self._policy_artifacts = PolicyAssignmentArtifactResource(client)

    def _artifact_resource(self, spec: BaseArtifactSpec) -> ArtifactResource:
        if isinstance(spec, PolicyAssignmentArtifactSpec):
            return self._policy_artifacts
        return self._artifacts

    def _plan_blueprint(self, spec: BlueprintSpec) -> PlannedChange:
        current = self._blueprints.read(spec.scope, spec.name)
        current_payload = current.to_spec().to_azure_payload() if current else None
        return plan_change(spec.address, spec.to_azure_payload(), current_payload)

    def _plan_artifact(self, spec: BaseArtifactSpec) -> PlannedChange:
        resource = self._artifact_resource(spec)
        current = resource.read(spec.resolved_scope, spec.blueprint_name, spec.name)
        current_payload = current.to_azure_payload() if current else None
        return plan_change(spec.address, spec.to_azure_payload(), current_payload)

    def _record_failure(
        self, result: ReconcileResult, address: str, error: Exception
    ) -> None:
        logger.error(
            "Resource operation failed",
            extra={
                "operation": result.operation,
                "address": address,
                "error": str(error),
                "error_type": type(error).__name__,
            },
        )
        result.failures.append(ResourceFailure(address=address, error=str(error)))

    def plan(self, manifest: BlueprintManifest) -> ReconcileResult:
        """Compare the manifest with the remote state without changing it."""
        result = ReconcileResult(operation="plan", started_at=datetime.now(UTC))

        for blueprint in manifest.blueprints:
            try:
                result.changes.append(self._plan_blueprint(blueprint))
            except RESOURCE_ERRORS as e:
                self._record_failure(result, blueprint.address, e)

        for artifact in manifest.all_artifacts:
            try:
                result.changes.append(self._plan_artifact(artifact))
            except RESOURCE_ERRORS as e:
                self._record_failure(result, artifact.address, e)

        result.completed_at = datetime.now(UTC)
        self._log_result(result)
        return result

    def apply(
        self, manifest: BlueprintManifest, publish_version: str | None = None
    ) -> ReconcileResult:
        """Create or update every resource that differs from the manifest.

        Args:
            manifest: Desired state.
            publish_version: If set, publish each successfully applied
                blueprint under this version after its artifacts are applied.
        """
        result = ReconcileResult(operation="apply", started_at=datetime.now(UTC))
        # Keyed by (scope, name); blueprint names are only unique within a scope
        failed_blueprints: set[tuple[str, str]] = set()
        unpublishable: set[tuple[str, str]] = set()

        for blueprint in manifest.blueprints:
            try:
                planned = self._plan_blueprint(blueprint)
                if planned.action != ChangeAction.NO_OP:
                    self._blueprints.create_or_update(blueprint)
                result.changes.append(planned)
            except RESOURCE_ERRORS as e:
                failed_blueprints.add((blueprint.scope, blueprint.name))
                self._record_failure(result, blueprint.address, e)

        for artifact in manifest.all_artifacts:
            parent = (artifact.scope or "", artifact.blueprint_name)
            if parent in failed_blueprints:
                logger.warning(
                    "Skipping artifact of failed blueprint",
                    extra={"address": artifact.address},
                )
                self._record_failure(
                    result,
                    artifact.address,
                    BlueprintApiError(f"blueprint {artifact.blueprint_name!r} was not applied"),
                )
                continue
            try:
                planned = self._plan_artifact(artifact)
                if planned.action != ChangeAction.NO_OP:
                    self._artifact_resource(artifact).create_or_update(artifact)
                result.changes.append(planned)
            except RESOURCE_ERRORS as e:
                unpublishable.add(parent)
                self._record_failure(result, artifact.address, e)

        if publish_version:
            for blueprint in manifest.blueprints:
                key = (blueprint.scope, blueprint.name)
                if key in failed_blueprints or key in unpublishable:
                    continue
                try:
                    self._blueprints.publish(blueprint.scope, blueprint.name, publish_version)
                    result.published.append(blueprint.address)
                except RESOURCE_ERRORS as e:
                    self._record_failure(result, blueprint.address, e)

        result.completed_at = datetime.now(UTC)
        self._log_result(result)
        return result

    def destroy(self, manifest: BlueprintManifest) -> ReconcileResult:
        """Delete every resource declared in the manifest."""
        result = ReconcileResult(operation="destroy", started_at=datetime.now(UTC))

        for artifact in reversed(manifest.all_artifacts):
            try:
                self._artifact_resource(artifact).delete(
                    artifact.resolved_scope, artifact.blueprint_name, artifact.name
                )
                result.changes.append(
                    PlannedChange(address=artifact.address, action=ChangeAction.DELETE)
                )
            except RESOURCE_ERRORS as e:
                self._record_failure(result, artifact.address, e)

        for blueprint in reversed(manifest.blueprints):
            try:
                self._blueprints.delete(blueprint.scope, blueprint.name)
                result.changes.append(
                    PlannedChange(address=blueprint.address, action=ChangeAction.DELETE)
                )
            except RESOURCE_ERRORS as e:
                self._record_failure(result, blueprint.address, e)

        result.completed_at = datetime.now(UTC)
        self._log_result(result)
        return result

    def _log_result(self, result: ReconcileResult) -> None:
        extra = result.summary()
        if result.failures:
            extra["failed_resources"] = [f.address for f in result.failures]
            logger.error("Reconciliation finished with failures", extra=extra)
        else:
            logger.info("Reconciliation result", extra=extra)
