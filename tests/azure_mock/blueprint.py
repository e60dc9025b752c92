"""Mock Azure Blueprint management client.

Mimics the operation groups of ``BlueprintManagementClient`` that the
provider uses. Request bodies are stored as given, responses are returned
as REST-shaped dictionaries.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from azure.core.exceptions import HttpResponseError, ResourceNotFoundError

BLUEPRINT_TYPE = "Microsoft.Blueprint/blueprints"
ARTIFACT_TYPE = "Microsoft.Blueprint/blueprints/artifacts"
PUBLISHED_TYPE = "Microsoft.Blueprint/blueprints/versions"


def not_found_error(message: str) -> ResourceNotFoundError:
    """Build the error the SDK raises for a 404 response."""
    error = ResourceNotFoundError(message=message)
    error.status_code = 404
    return error


def http_error(message: str, status_code: int) -> HttpResponseError:
    """Build an SDK error carrying an HTTP status code."""
    error = HttpResponseError(message=message)
    error.status_code = status_code
    return error


def _timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass
class MockBlueprintService:
    """In-memory state shared by the operation groups.

    Keys use the resource scope as the SDK receives it (no leading slash).
    """

    blueprints: dict[tuple[str, str], dict[str, Any]] = field(default_factory=dict)
    artifacts: dict[tuple[str, str, str], dict[str, Any]] = field(default_factory=dict)
    published: dict[tuple[str, str, str], dict[str, Any]] = field(default_factory=dict)
    calls: list[tuple[Any, ...]] = field(default_factory=list)
    _failures: dict[str, Exception] = field(default_factory=dict)

    @property
    def blueprint_count(self) -> int:
        return len(self.blueprints)

    @property
    def artifact_count(self) -> int:
        return len(self.artifacts)

    def fail_next(self, operation: str, status_code: int = 500, message: str = "Internal error") -> None:
        """Make the next call to ``operation`` raise.

        Args:
            operation: Operation name, e.g. ``"blueprints.create_or_update"``.
            status_code: HTTP status of the injected error.
            message: Error message.
        """
        self._failures[operation] = http_error(message, status_code)

    def record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, *args))
        failure = self._failures.pop(operation, None)
        if failure is not None:
            raise failure

    def calls_to(self, operation: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == operation]

    def put_blueprint(self, resource_scope: str, name: str, body: dict[str, Any]) -> dict[str, Any]:
        """Seed or overwrite a blueprint directly, bypassing call recording."""
        existing = self.blueprints.get((resource_scope, name))
        created = existing["properties"]["status"]["timeCreated"] if existing else _timestamp()

        properties = copy.deepcopy(body.get("properties") or {})
        properties["status"] = {"timeCreated": created, "lastModified": _timestamp()}

        stored = {
            "id": f"/{resource_scope}/providers/{BLUEPRINT_TYPE}/{name}",
            "name": name,
            "type": BLUEPRINT_TYPE,
            "properties": properties,
        }
        self.blueprints[(resource_scope, name)] = stored
        return copy.deepcopy(stored)

    def put_artifact(
        self, resource_scope: str, blueprint_name: str, name: str, body: dict[str, Any]
    ) -> dict[str, Any]:
        """Seed or overwrite an artifact directly, bypassing call recording."""
        stored = {
            "id": f"/{resource_scope}/providers/{BLUEPRINT_TYPE}/{blueprint_name}/artifacts/{name}",
            "name": name,
            "type": ARTIFACT_TYPE,
            "kind": body.get("kind"),
            "properties": copy.deepcopy(body.get("properties") or {}),
        }
        self.artifacts[(resource_scope, blueprint_name, name)] = stored
        return copy.deepcopy(stored)


class _BlueprintsOperations:
    def __init__(self, service: MockBlueprintService) -> None:
        self._service = service

    def get(self, resource_scope: str, blueprint_name: str) -> dict[str, Any]:
        self._service.record("blueprints.get", resource_scope, blueprint_name)
        stored = self._service.blueprints.get((resource_scope, blueprint_name))
        if stored is None:
            raise not_found_error(f"Blueprint '{blueprint_name}' could not be found")
        return copy.deepcopy(stored)

    def create_or_update(
        self, resource_scope: str, blueprint_name: str, blueprint: dict[str, Any]
    ) -> dict[str, Any]:
        self._service.record("blueprints.create_or_update", resource_scope, blueprint_name, blueprint)
        return self._service.put_blueprint(resource_scope, blueprint_name, blueprint)

    def delete(self, resource_scope: str, blueprint_name: str) -> dict[str, Any]:
        self._service.record("blueprints.delete", resource_scope, blueprint_name)
        stored = self._service.blueprints.pop((resource_scope, blueprint_name), None)
        if stored is None:
            raise not_found_error(f"Blueprint '{blueprint_name}' could not be found")
        for key in [k for k in self._service.artifacts if k[:2] == (resource_scope, blueprint_name)]:
            del self._service.artifacts[key]
        return stored


class _ArtifactsOperations:
    def __init__(self, service: MockBlueprintService) -> None:
        self._service = service

    def get(self, resource_scope: str, blueprint_name: str, artifact_name: str) -> dict[str, Any]:
        self._service.record("artifacts.get", resource_scope, blueprint_name, artifact_name)
        stored = self._service.artifacts.get((resource_scope, blueprint_name, artifact_name))
        if stored is None:
            raise not_found_error(f"Artifact '{artifact_name}' could not be found")
        return copy.deepcopy(stored)

    def create_or_update(
        self,
        resource_scope: str,
        blueprint_name: str,
        artifact_name: str,
        artifact: dict[str, Any],
    ) -> dict[str, Any]:
        self._service.record(
            "artifacts.create_or_update", resource_scope, blueprint_name, artifact_name, artifact
        )
        if (resource_scope, blueprint_name) not in self._service.blueprints:
            raise not_found_error(f"Blueprint '{blueprint_name}' could not be found")
        return self._service.put_artifact(resource_scope, blueprint_name, artifact_name, artifact)

    def delete(self, resource_scope: str, blueprint_name: str, artifact_name: str) -> dict[str, Any]:
        self._service.record("artifacts.delete", resource_scope, blueprint_name, artifact_name)
        stored = self._service.artifacts.pop((resource_scope, blueprint_name, artifact_name), None)
        if stored is None:
            raise not_found_error(f"Artifact '{artifact_name}' could not be found")
        return stored


class _PublishedBlueprintsOperations:
    def __init__(self, service: MockBlueprintService) -> None:
        self._service = service

    def create(self, resource_scope: str, blueprint_name: str, version_id: str) -> dict[str, Any]:
        self._service.record("published_blueprints.create", resource_scope, blueprint_name, version_id)
        blueprint = self._service.blueprints.get((resource_scope, blueprint_name))
        if blueprint is None:
            raise not_found_error(f"Blueprint '{blueprint_name}' could not be found")
        if (resource_scope, blueprint_name, version_id) in self._service.published:
            raise http_error(f"Version '{version_id}' already exists", 409)

        published = {
            "id": f"{blueprint['id']}/versions/{version_id}",
            "name": version_id,
            "type": PUBLISHED_TYPE,
            "properties": {"blueprintName": blueprint_name},
        }
        self._service.published[(resource_scope, blueprint_name, version_id)] = published
        return copy.deepcopy(published)


class MockBlueprintManagementClient:
    """Drop-in replacement for ``BlueprintManagementClient`` in tests."""

    def __init__(self, service: MockBlueprintService | None = None) -> None:
        self.service = service or MockBlueprintService()
        self.blueprints = _BlueprintsOperations(self.service)
        self.artifacts = _ArtifactsOperations(self.service)
        self.published_blueprints = _PublishedBlueprintsOperations(self.service)
