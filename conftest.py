"""Shared test fixtures for the phone tracker project."""

from typing import Any

import pytest
from rest_framework.test import APIClient

from phone_tracker.models import Device
from phone_tracker.services import register_device


@pytest.fixture
def api_client() -> APIClient:
    """Provide a DRF API client for testing."""
    return APIClient()


@pytest.fixture
def registered_device(db: Any) -> Device:
    """Register a device through the registry operation."""
    return register_device('d1', 'Phone A', None)


@pytest.fixture
def other_device(db: Any) -> Device:
    """Register a second, unrelated device."""
    return register_device('d2', 'Phone B', '+15555550100')
