import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import httpx
import pytest

DB_PATH = Path(tempfile.mkdtemp()) / "lifeboard-test.db"

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{DB_PATH}"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["BASE_CURRENCY"] = "INR"

from fastapi.testclient import TestClient  # noqa: E402

from lifeboard.dependencies import get_now, get_rate_provider  # noqa: E402
from lifeboard.main import app  # noqa: E402
from lifeboard.services.rates import RateCache, RateProvider  # noqa: E402

FIXED_NOW = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)

# Units per 1 INR, as the rate source quotes them; chosen so the inverse is exact
QUOTED_RATES = {"INR": 1, "USD": 0.015625, "EUR": 0.0078125, "GBP": 0.00390625}


def rates_transport(payload: dict | None = None, status_code: int = 200) -> httpx.MockTransport:
    body = payload if payload is not None else {"base": "INR", "rates": QUOTED_RATES}

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=body)

    return httpx.MockTransport(handler)


@pytest.fixture
def rate_provider() -> RateProvider:
    return RateProvider(
        base_currency="INR",
        api_url="https://rates.test/v4/latest",
        fallback_rates={"INR": 1, "USD": 83, "EUR": 90, "GBP": 105},
        cache=RateCache(ttl_seconds=3600),
        transport=rates_transport(),
    )


@pytest.fixture
def client(rate_provider):
    if DB_PATH.exists():
        DB_PATH.unlink()
    app.dependency_overrides[get_now] = lambda: FIXED_NOW
    app.dependency_overrides[get_rate_provider] = lambda: rate_provider
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client: TestClient, email: str = "user@example.com", password: str = "secret123") -> dict:
    response = client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "name": "Test User"},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def auth_headers(client) -> dict:
    data = register(client)
    return {"Authorization": f"Bearer {data['access_token']}"}
