"""Blueprint management API client.

Thin wrapper over ``azure.mgmt.blueprint.BlueprintManagementClient``. Request
bodies and responses are REST-shaped dictionaries: expansion and flattening
live in models.py. SDK errors are converted to BlueprintApiError carrying the
HTTP status code, and a 404 on read means the resource is gone.
"""

from __future__ import annotations

import logging
from typing import Any

from azure.core.exceptions import AzureError, HttpResponseError
from azure.mgmt.blueprint import BlueprintManagementClient

from .config import ProviderConfig
from .security import get_credential

logger = logging.getLogger(__name__)

HTTP_NOT_FOUND = 404


class BlueprintApiError(Exception):
    """Raised when a Blueprint API call fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def not_found(self) -> bool:
        return self.status_code == HTTP_NOT_FOUND


def _resource_scope(scope: str) -> str:
    # The SDK URL template already carries the leading slash
    return scope.strip("/")


def _to_dict(result: Any) -> dict[str, Any]:
    if result is None:
        return {}
    if isinstance(result, dict):
        return result
    return result.serialize(keep_readonly=True)


class BlueprintClient:
    """Blueprint and artifact CRUD against the remote service.

    The management client is injected so callers (and tests) control
    authentication and transport.
    """

    def __init__(self, management_client: Any) -> None:
        self._client = management_client

    @classmethod
    def from_config(cls, config: ProviderConfig) -> BlueprintClient:
        """Build a client from validated provider configuration."""
        endpoint = config.resource_manager_url.rstrip("/")
        management_client = BlueprintManagementClient(
            credential=get_credential(config),
            base_url=endpoint,
            credential_scopes=[f"{endpoint}/.default"],
            read_timeout=config.api_timeout_seconds,
        )
        return cls(management_client)

    def _call(self, action: str, target: str, operation: Any, *args: Any) -> Any:
        logger.debug("Blueprint API call", extra={"action": action, "target": target})
        try:
            return operation(*args)
        except HttpResponseError as e:
            raise BlueprintApiError(
                f"Error {action} {target}: {e.message}", status_code=e.status_code
            ) from e
        except AzureError as e:
            raise BlueprintApiError(f"Error {action} {target}: {e}") from e

    def _get_or_none(self, action: str, target: str, operation: Any, *args: Any) -> dict[str, Any] | None:
        try:
            result = self._call(action, target, operation, *args)
        except BlueprintApiError as e:
            if e.not_found:
                logger.debug("%s was not found", target)
                return None
            raise
        return _to_dict(result)

    def _delete_if_present(self, action: str, target: str, operation: Any, *args: Any) -> None:
        try:
            self._call(action, target, operation, *args)
        except BlueprintApiError as e:
            if not e.not_found:
                raise
            logger.info("%s already deleted", target)

    # -------------------------------------------------------------------------
    # Blueprints
    # -------------------------------------------------------------------------

    def get_blueprint(self, scope: str, name: str) -> dict[str, Any] | None:
        """Read a blueprint definition. Returns None if it does not exist."""
        return self._get_or_none(
            "reading",
            f"blueprint {name!r} in scope {scope!r}",
            self._client.blueprints.get,
            _resource_scope(scope),
            name,
        )

    def create_or_update_blueprint(
        self, scope: str, name: str, body: dict[str, Any]
    ) -> dict[str, Any]:
        """Create or update a blueprint definition."""
        return _to_dict(
            self._call(
                "creating or updating",
                f"blueprint {name!r} in scope {scope!r}",
                self._client.blueprints.create_or_update,
                _resource_scope(scope),
                name,
                body,
            )
        )

    def delete_blueprint(self, scope: str, name: str) -> None:
        """Delete a blueprint definition. A missing blueprint is not an error."""
        self._delete_if_present(
            "deleting",
            f"blueprint {name!r} in scope {scope!r}",
            self._client.blueprints.delete,
            _resource_scope(scope),
            name,
        )

    def publish_blueprint(self, scope: str, name: str, version: str) -> dict[str, Any]:
        """Publish the current blueprint definition as a new version."""
        return _to_dict(
            self._call(
                "publishing",
                f"blueprint {name!r} version {version!r} in scope {scope!r}",
                self._client.published_blueprints.create,
                _resource_scope(scope),
                name,
                version,
            )
        )

    # -------------------------------------------------------------------------
    # Artifacts
    # -------------------------------------------------------------------------

    def get_artifact(self, scope: str, blueprint_name: str, name: str) -> dict[str, Any] | None:
        """Read an artifact. Returns None if it does not exist."""
        return self._get_or_none(
            "reading",
            f"artifact {name!r} from blueprint {blueprint_name!r} in scope {scope!r}",
            self._client.artifacts.get,
            _resource_scope(scope),
            blueprint_name,
            name,
        )

    def create_or_update_artifact(
        self, scope: str, blueprint_name: str, name: str, body: dict[str, Any]
    ) -> dict[str, Any]:
        """Create or update an artifact within a blueprint."""
        return _to_dict(
            self._call(
                "creating or updating",
                f"artifact {name!r} in blueprint {blueprint_name!r} in scope {scope!r}",
                self._client.artifacts.create_or_update,
                _resource_scope(scope),
                blueprint_name,
                name,
                body,
            )
        )

    def delete_artifact(self, scope: str, blueprint_name: str, name: str) -> None:
        """Delete an artifact. A missing artifact is not an error."""
        self._delete_if_present(
            "deleting",
            f"artifact {name!r} from blueprint {blueprint_name!r} in scope {scope!r}",
            self._client.artifacts.delete,
            _resource_scope(scope),
            blueprint_name,
            name,
        )
