"""
pytest configuration for async tests
"""
import pytest

from tests.fakes import FakeGeminiClient


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "asyncio: marks tests as async")


@pytest.fixture
def fake_client():
    return FakeGeminiClient()
