"""Fixtures for API tests."""
import pytest
from fastapi.testclient import TestClient
from cepfinder.main import app
from cepfinder.api.deps import get_upstream_client


@pytest.fixture
def client(fake_client):
    """
    Create FastAPI test client with the upstream client replaced by a fake.

    Args:
        fake_client: Fake upstream client from root conftest

    Returns:
        TestClient: FastAPI test client
    """
    app.dependency_overrides[get_upstream_client] = lambda: fake_client

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
