"""Pytest configuration and fixtures for the NewsLocal search service tests."""

from collections.abc import Generator
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from newslocal.api.deps import get_cache, get_news_backend
from newslocal.main import app
from newslocal.services.search_cache import SearchResultCache, reset_search_cache
from tests.fakes import FakeClock, FakeNewsBackend


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> SearchResultCache:
    return SearchResultCache(max_entries=100, ttl_seconds=300, clock=clock)


@pytest.fixture
def backend() -> FakeNewsBackend:
    return FakeNewsBackend()


@pytest.fixture(autouse=True)
def _reset_process_cache() -> Generator[None, None, None]:
    """Each test starts without a process-wide cache."""
    reset_search_cache()
    yield
    reset_search_cache()


@pytest.fixture
def client(backend: FakeNewsBackend, cache: SearchResultCache) -> Generator[TestClient, None, None]:
    """Create a test client wired to the fake backend and a fresh cache."""
    app.dependency_overrides[get_news_backend] = lambda: backend
    app.dependency_overrides[get_cache] = lambda: cache
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> Generator[dict[str, str], None, None]:
    """Configure an admin key and return matching request headers."""
    with patch(
        "newslocal.core.admin_auth.get_settings",
        return_value=MagicMock(admin_api_key="test-admin-key"),
    ):
        yield {"X-Admin-Api-Key": "test-admin-key"}
