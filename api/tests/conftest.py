from __future__ import annotations

import os

os.environ.setdefault("LP_OTEL_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from laborportal.core.config import get_settings
from laborportal.main import app
from laborportal.services.factory import get_store
from laborportal.services.local_store import LocalStore


@pytest.fixture
def store() -> LocalStore:
    return LocalStore()


@pytest.fixture
def api_client(store: LocalStore) -> TestClient:
    get_settings.cache_clear()
    app.dependency_overrides[get_store] = lambda: store

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
    get_settings.cache_clear()
