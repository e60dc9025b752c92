"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Add tests to path for azure_mock imports
tests_path = Path(__file__).parent
sys.path.insert(0, str(tests_path))

from azure_mock import MockBlueprintManagementClient  # noqa: E402
from blueprint_provider.client import BlueprintClient  # noqa: E402


@pytest.fixture
def mock_management_client() -> MockBlueprintManagementClient:
    """Fresh in-memory Blueprint service."""
    return MockBlueprintManagementClient()


@pytest.fixture
def client(mock_management_client: MockBlueprintManagementClient) -> BlueprintClient:
    """BlueprintClient backed by the in-memory service."""
    return BlueprintClient(mock_management_client)
