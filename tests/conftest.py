import asyncio

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from main import app
from sportsmatch.cache import Cache
from sportsmatch.dependencies import get_cache, get_predictor, get_query
from sportsmatch.prediction import PredictionGenerator
from sportsmatch.security import create_access_token
from sportsmatch.store import EntityStore, QueryEngine


class FakeRedis:
    """In-process double for the redis client calls the cache makes."""

    def __init__(self, reachable: bool = True):
        self.reachable = reachable
        self.data = {}
        self.ttls = {}

    def _check(self):
        if not self.reachable:
            raise RedisConnectionError("Connection refused")

    async def ping(self):
        self._check()
        return True

    async def get(self, key):
        self._check()
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self._check()
        self.data[key] = value
        self.ttls[key] = ex
        return True

    async def delete(self, *keys):
        self._check()
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def aclose(self):
        pass


@pytest.fixture(name="store")
def store_fixture():
    return EntityStore()


@pytest.fixture(name="query")
def query_fixture(store: EntityStore):
    return QueryEngine(store)


@pytest.fixture(name="redis_backend")
def redis_backend_fixture():
    return FakeRedis()


@pytest.fixture(name="cache")
def cache_fixture(redis_backend: FakeRedis):
    cache = Cache(redis_backend)
    asyncio.run(cache.connect())
    return cache


@pytest.fixture(name="predictor")
def predictor_fixture():
    # No API key: always the fallback heuristic
    return PredictionGenerator(api_key=None)


@pytest.fixture(name="client")
def client_fixture(query: QueryEngine, cache: Cache, predictor: PredictionGenerator):
    app.dependency_overrides[get_query] = lambda: query
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_predictor] = lambda: predictor
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="auth_headers")
def auth_headers_fixture():
    token = create_access_token("test-user-id", "tester@example.com")
    return {"Authorization": f"Bearer {token}"}
