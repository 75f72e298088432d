"""Shared test fixtures."""

import json
from dataclasses import dataclass, field
from typing import Any
from unittest.mock import AsyncMock, patch
from urllib.parse import urlsplit

import pytest

from listings_mcp.api.client import ApiClient
from listings_mcp.config import ListingsConfig
from listings_mcp.models import SessionUser
from listings_mcp.routes import Navigator
from listings_mcp.session import InMemorySessionStore, SessionAccessor

BASE_URL = "http://api.test"


@dataclass
class MockResponse:
    """Lightweight mock for curl_cffi response objects."""

    status_code: int
    text: str = ""


def json_response(status_code: int, payload: Any) -> MockResponse:
    return MockResponse(status_code, json.dumps(payload))


def make_listing(i: int, **overrides) -> dict:
    """Raw listing record as the API returns it."""
    record = {
        "id": str(i),
        "title": f"Listing {i}",
        "description": "",
        "location_address": f"{i} Main St",
        "price": 1000 * i,
        "property_type": "Apartment",
        "status": "For Sale",
        "images": [],
    }
    record.update(overrides)
    return record


@dataclass
class FakeBackend:
    """Routes mocked requests by (method, path) and records every call."""

    routes: dict[tuple[str, str], list[MockResponse]] = field(default_factory=dict)
    calls: list[tuple[str, str, dict]] = field(default_factory=list)

    def add(self, method: str, path: str, status_code: int, payload: Any) -> None:
        self.routes.setdefault((method, path), []).append(json_response(status_code, payload))

    async def request(self, method: str, url: str, **kwargs: Any) -> MockResponse:
        self.calls.append((method, url, kwargs))
        queue = self.routes[(method, urlsplit(url).path)]
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def paths(self) -> list[tuple[str, str]]:
        return [(method, urlsplit(url).path) for method, url, _ in self.calls]


@pytest.fixture
def config() -> ListingsConfig:
    return ListingsConfig(base_url=BASE_URL, environment="production")


@pytest.fixture
def backend():
    """Patch the curl_cffi session with a FakeBackend."""
    fake = FakeBackend()
    with patch("listings_mcp.api.client.AsyncSession") as MockSession:
        mock_session = MockSession.return_value
        mock_session.request = AsyncMock(side_effect=fake.request)
        mock_session.close = AsyncMock()
        yield fake


@pytest.fixture
def client(config) -> ApiClient:
    return ApiClient(config=config)


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def session(store) -> SessionAccessor:
    return SessionAccessor(store)


@pytest.fixture
def admin_session(session) -> SessionAccessor:
    session.save("ADMIN-TOKEN", SessionUser(id="9", email="boss@x.com", role="admin", full_name="Boss"))
    return session


@pytest.fixture
def screen_kwargs(client, session) -> dict:
    return {"client": client, "session": session, "navigator": Navigator(session)}
