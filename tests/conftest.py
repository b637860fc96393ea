"""
Pytest configuration.

Registers the integration marker/option and provides an isolated
application state (in-memory storage, client-side clipboard) per test.
"""

import pytest
from fastapi.testclient import TestClient

from ordersheet.api.deps import AppState, get_state
from ordersheet.api.main import app
from ordersheet.services.export import ResponseClipboard, WebhookClient
from ordersheet.services.storage import MemoryStore


def pytest_addoption(parser):
    """Add custom command-line options"""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests against the real Gemini API"
    )


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test requiring a real Gemini API key"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is specified"""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="need --run-integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def state(store):
    """Fresh process state backed by an in-memory store"""
    return AppState(store, webhook=WebhookClient(), clipboard=ResponseClipboard())


@pytest.fixture
def client(state):
    app.dependency_overrides[get_state] = lambda: state
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
