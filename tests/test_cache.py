import pytest

from sportsmatch.cache import Cache
from sportsmatch.cache_keys import keys_for, INVALIDATION_MAP

from conftest import FakeRedis


class Counter:
    def __init__(self, value):
        self.value = value
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.value


@pytest.mark.asyncio
async def test_read_populates_then_hits(cache, redis_backend):
    compute = Counter([{"id": "t1", "name": "Red"}])

    first = await cache.read("teams:all", compute)
    second = await cache.read("teams:all", compute)

    assert first == second == [{"id": "t1", "name": "Red"}]
    assert compute.calls == 1
    assert redis_backend.ttls["teams:all"] == 300


@pytest.mark.asyncio
async def test_invalidate_forces_recompute(cache):
    compute = Counter({"id": "t1"})

    await cache.read("team:t1", compute)
    await cache.invalidate("team:t1")
    await cache.read("team:t1", compute)

    assert compute.calls == 2


@pytest.mark.asyncio
async def test_read_accepts_async_compute(cache):
    async def compute():
        return {"status": "live"}

    assert await cache.read("match:m1", compute) == {"status": "live"}
    assert await cache.get("match:m1") == '{"status": "live"}'


@pytest.mark.asyncio
async def test_values_are_json_on_hit_and_miss(cache):
    from datetime import datetime, UTC

    compute = Counter({"date": datetime(2025, 1, 1, tzinfo=UTC)})

    miss = await cache.read("match:m1", compute)
    hit = await cache.read("match:m1", compute)

    assert miss == hit
    assert isinstance(miss["date"], str)


@pytest.mark.asyncio
async def test_compute_errors_propagate_and_are_not_cached(cache, redis_backend):
    def compute():
        raise LookupError("boom")

    with pytest.raises(LookupError):
        await cache.read("team:missing", compute)
    assert "team:missing" not in redis_backend.data


@pytest.mark.asyncio
async def test_unreadable_entry_is_treated_as_miss(cache, redis_backend):
    redis_backend.data["team:t1"] = "{not json"
    compute = Counter({"id": "t1"})

    assert await cache.read("team:t1", compute) == {"id": "t1"}
    assert compute.calls == 1
    assert redis_backend.data["team:t1"] == '{"id": "t1"}'


@pytest.mark.asyncio
async def test_unconfigured_cache_always_computes():
    cache = Cache(None)
    assert await cache.connect() is False

    compute = Counter(["x"])
    await cache.read("teams:all", compute)
    await cache.read("teams:all", compute)
    await cache.invalidate("teams:all")

    assert compute.calls == 2
    assert cache.available is False


@pytest.mark.asyncio
async def test_unreachable_backend_degrades_silently():
    backend = FakeRedis(reachable=False)
    cache = Cache(backend)

    assert await cache.connect() is False

    # Backend coming back later is not picked up: no mid-process reconnect
    backend.reachable = True
    compute = Counter(["x"])
    await cache.read("teams:all", compute)
    await cache.read("teams:all", compute)
    await cache.invalidate("teams:all")

    assert compute.calls == 2
    assert backend.data == {}


@pytest.mark.asyncio
async def test_backend_failure_after_connect_is_absorbed(cache, redis_backend):
    compute = Counter({"id": "p1"})
    await cache.read("player:p1", compute)

    redis_backend.reachable = False
    assert await cache.read("player:p1", compute) == {"id": "p1"}
    await cache.invalidate("player:p1")

    assert compute.calls == 2


def test_keys_for_player_covers_team_keys():
    player = {"id": "p1", "team_id": "t1", "name": "A"}

    assert keys_for("players", player) == [
        "teams:all", "players:all", "player:p1", "players:team:t1", "team:t1",
    ]


def test_keys_for_old_and_new_state_without_duplicates():
    before = {"id": "m1", "status": "scheduled", "home_team_id": "a", "away_team_id": "b"}
    after = {**before, "status": "live"}

    keys = keys_for("matches", before, after)

    assert "matches:status:scheduled" in keys
    assert "matches:status:live" in keys
    assert keys.count("team:a") == 1


def test_every_collection_has_an_invalidation_entry():
    assert set(INVALIDATION_MAP) == {"users", "teams", "players", "matches"}
