import os
import pathlib
import sys
from datetime import datetime, timezone

import pytest


REPO_ROOT = pathlib.Path(__file__).resolve().parents[2]
sys.path.append(str(REPO_ROOT))


def pytest_configure():
    # keep a developer's .env from changing test expectations
    for name in ("FORECAST_HORIZON", "DEFAULT_BUSINESS_TYPE", "DEFAULT_INDUSTRY", "CORS_ALLOW_ORIGINS"):
        os.environ.pop(name, None)


@pytest.fixture()
def fixed_now():
    return datetime(2024, 7, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture()
def api_client():
    from backend.app.main import app
    from fastapi.testclient import TestClient

    client = TestClient(app)
    try:
        yield client
    finally:
        client.close()
