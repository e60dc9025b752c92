"""In-memory Azure Blueprint service for tests.

Stands in for ``azure.mgmt.blueprint.BlueprintManagementClient`` so the
client, lifecycle and reconciler code run without Azure connectivity.

Key Features:
- In-memory blueprints, artifacts and published versions keyed by scope
- REST-shaped responses with computed id, name, type and status
- 404 errors raised the way the SDK raises them
- Error injection for testing failure scenarios

Usage:
    from azure_mock import MockBlueprintManagementClient

    mock = MockBlueprintManagementClient()
    client = BlueprintClient(mock)

    BlueprintResource(client).create_or_update(spec)
    assert mock.service.blueprint_count == 1
"""

from .blueprint import MockBlueprintManagementClient, MockBlueprintService, not_found_error

__all__ = [
    "MockBlueprintManagementClient",
    "MockBlueprintService",
    "not_found_error",
]
