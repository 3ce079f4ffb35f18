"""Shared pytest fixtures for all tests."""
import pytest
from cepfinder.config import get_settings
from cepfinder.lookup.models import SourceSpec
from tests.fakes.upstream_client import FakeUpstreamClient


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """
    Clear the cached settings before and after each test.

    Tests that set environment variables get a fresh Settings instance.
    """
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_client() -> FakeUpstreamClient:
    """Provide an unconfigured fake upstream client."""
    return FakeUpstreamClient()


@pytest.fixture
def alpha_beta_sources():
    """Two test sources, Alpha and Beta."""
    return [
        SourceSpec(name="Alpha", endpoint="https://alpha.test/cep/{cep}"),
        SourceSpec(name="Beta", endpoint="https://beta.test/ws/{cep}/json/"),
    ]
