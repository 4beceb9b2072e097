"""
Pytest Configuration for Tank Board Tests

IMPORTANT: This must be the FIRST file imported by pytest.
The policy file must be pinned BEFORE settings.py is imported.
"""

import os
from pathlib import Path

# CRITICAL: Set this BEFORE any other imports
os.environ["TANK_POLICY_FILE"] = str(
    Path(__file__).parent.parent / "tank_policy.yaml"
)

import pytest

# Import all fixtures
from tests.fixtures.database_fixtures import *  # noqa
from tests.fixtures.tank_fixtures import *  # noqa


@pytest.fixture
def test_client():
    """Provide a test client for API tests."""
    from fastapi.testclient import TestClient

    from main import app

    return TestClient(app)
