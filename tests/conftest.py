from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from qrisgen.api import app
from qrisgen.config import settings


@pytest.fixture
def client() -> TestClient:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-API-Key": settings.api_key}
