import pytest

from fakes import FakeSearchClient
from tools.web.cache import SearchCacheStore
from tools.web.contracts import SearchFailure


@pytest.fixture
def storage_path(tmp_path):
    return tmp_path / "data" / "searches.json"


@pytest.fixture
def store(storage_path):
    cache = SearchCacheStore(storage_path)
    cache.load()
    return cache


@pytest.fixture
def fake_client():
    return FakeSearchClient()


@pytest.fixture
def failing_client():
    return FakeSearchClient(failure=SearchFailure("Invalid API key", 401))
