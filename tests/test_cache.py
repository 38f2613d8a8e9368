"""
Tests for the intelligence result cache and its backends.
"""

import pytest
import redis.asyncio as redis

from modules.intelligence import cache as cache_module
from modules.intelligence.cache import (
    CacheBackend,
    IntelligenceCache,
    MemoryCacheBackend,
    RedisCacheBackend,
)
from modules.intelligence.core.exceptions import CacheBackendError
from modules.intelligence.core.models import IntelligenceResult
from shared.utils.config import settings

from tests.conftest import NOW, TENANT, build_snapshot


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class BrokenBackend(CacheBackend):
    async def get(self, key):
        raise CacheBackendError("backend down")

    async def set(self, key, value, ttl_seconds):
        raise CacheBackendError("backend down")

    async def delete(self, key):
        raise CacheBackendError("backend down")


class FakeRedis:
    """Minimal async stand-in for redis.asyncio.Redis."""

    def __init__(self, fail: bool = False):
        self.store = {}
        self.ttls = {}
        self.fail = fail
        self.closed = False

    def _check(self):
        if self.fail:
            raise redis.ConnectionError("connection refused")

    async def get(self, key):
        self._check()
        return self.store.get(key)

    async def setex(self, key, ttl, value):
        self._check()
        self.store[key] = value
        self.ttls[key] = ttl

    async def delete(self, key):
        self._check()
        self.store.pop(key, None)

    async def ping(self):
        self._check()
        return True

    async def aclose(self):
        self.closed = True


class Counter:
    """Async compute function that counts its calls."""

    def __init__(self, value=None):
        self.calls = 0
        self.value = value

    async def __call__(self):
        self.calls += 1
        return self.value if self.value is not None else {"call": self.calls}


def make_result():
    return IntelligenceResult(tenant_id=TENANT, signals=build_snapshot(), generated_at=NOW)


@pytest.mark.asyncio
async def test_hit_returns_identical_object():
    cache = IntelligenceCache(MemoryCacheBackend())
    compute = Counter()

    first = await cache.get_or_compute(TENANT, compute)
    second = await cache.get_or_compute(TENANT, compute)

    assert second is first
    assert compute.calls == 1
    assert cache.get_stats() == {"hits": 1, "misses": 1, "hit_rate_percent": 50.0, "total_requests": 2}


@pytest.mark.asyncio
async def test_entry_expires_after_ttl():
    clock = FakeClock()
    cache = IntelligenceCache(MemoryCacheBackend(clock=clock), ttl_seconds=900)
    compute = Counter()

    await cache.get_or_compute(TENANT, compute)
    clock.advance(899)
    await cache.get_or_compute(TENANT, compute)
    assert compute.calls == 1

    clock.advance(1)
    await cache.get_or_compute(TENANT, compute)
    assert compute.calls == 2


@pytest.mark.asyncio
async def test_per_call_ttl_overrides_default():
    clock = FakeClock()
    cache = IntelligenceCache(MemoryCacheBackend(clock=clock), ttl_seconds=900)
    compute = Counter()

    await cache.get_or_compute(TENANT, compute, ttl_seconds=1800)
    clock.advance(1000)
    await cache.get_or_compute(TENANT, compute)

    assert compute.calls == 1


@pytest.mark.asyncio
async def test_actor_and_tenant_keys_are_separate():
    cache = IntelligenceCache(MemoryCacheBackend())
    compute = Counter()

    await cache.get_or_compute(TENANT, compute)
    await cache.get_or_compute(TENANT, compute, actor_id="user-1")
    await cache.get_or_compute("ws-other", compute)

    assert compute.calls == 3
    assert cache.key(TENANT) == "intelligence:insights:ws-acme"
    assert cache.key(TENANT, "user-1") == "intelligence:insights:ws-acme:user-1"


@pytest.mark.asyncio
async def test_invalidate_forces_recompute():
    backend = MemoryCacheBackend()
    cache = IntelligenceCache(backend)
    compute = Counter()

    await cache.get_or_compute(TENANT, compute)
    await cache.invalidate(TENANT)
    await cache.get_or_compute(TENANT, compute)

    assert compute.calls == 2
    assert len(backend) == 1


@pytest.mark.asyncio
async def test_compute_error_propagates_and_caches_nothing():
    backend = MemoryCacheBackend()
    cache = IntelligenceCache(backend)

    async def explode():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await cache.get_or_compute(TENANT, explode)

    assert len(backend) == 0


@pytest.mark.asyncio
async def test_broken_backend_falls_through_to_compute(caplog):
    cache = IntelligenceCache(BrokenBackend())
    compute = Counter()

    first = await cache.get_or_compute(TENANT, compute)
    second = await cache.get_or_compute(TENANT, compute)
    await cache.invalidate(TENANT)

    assert first == {"call": 1}
    assert second == {"call": 2}
    assert "Cache read failed" in caplog.text
    assert "Cache write failed" in caplog.text


@pytest.mark.asyncio
async def test_redis_backend_round_trip():
    client = FakeRedis()
    cache = IntelligenceCache(RedisCacheBackend(client=client), ttl_seconds=1200)
    result = make_result()

    stored = await cache.get_or_compute(TENANT, Counter(result))
    loaded = await cache.get(TENANT)

    assert stored is result
    assert loaded == result
    assert client.ttls["intelligence:insights:ws-acme"] == 1200


@pytest.mark.asyncio
async def test_redis_backend_errors_become_cache_errors():
    backend = RedisCacheBackend(client=FakeRedis(fail=True))

    with pytest.raises(CacheBackendError):
        await backend.get("k")
    with pytest.raises(CacheBackendError):
        await backend.set("k", make_result(), 900)


@pytest.mark.asyncio
async def test_redis_corrupt_entry_is_a_miss():
    client = FakeRedis()
    client.store["intelligence:insights:ws-acme"] = b'{"not": "a result"}'
    cache = IntelligenceCache(RedisCacheBackend(client=client))
    result = make_result()

    value = await cache.get_or_compute(TENANT, Counter(result))

    assert value is result
    assert cache.misses == 1


@pytest.mark.asyncio
async def test_redis_client_built_from_settings(monkeypatch):
    client = FakeRedis()
    calls = []

    def from_url(url, **kwargs):
        calls.append((url, kwargs))
        return client

    monkeypatch.setattr(cache_module.redis, "from_url", from_url)
    monkeypatch.setattr(settings, "REDIS_URL", "redis://cache.internal:6380/2")
    monkeypatch.setattr(settings, "REDIS_MAX_CONNECTIONS", 7)
    monkeypatch.setattr(settings, "REDIS_SOCKET_TIMEOUT_SECONDS", 0.5)
    backend = RedisCacheBackend()

    await backend.set("k", make_result(), 900)
    assert await backend.get("k") == make_result()

    assert len(calls) == 1
    url, options = calls[0]
    assert url == "redis://cache.internal:6380/2"
    assert options["max_connections"] == 7
    assert options["socket_timeout"] == 0.5
    assert options["socket_connect_timeout"] == settings.REDIS_CONNECT_TIMEOUT_SECONDS

    await backend.close()
    assert client.closed


@pytest.mark.asyncio
async def test_invalid_redis_url_is_a_cache_error(monkeypatch):
    monkeypatch.setattr(settings, "REDIS_URL", "not-a-redis-url")

    with pytest.raises(CacheBackendError, match="Invalid Redis configuration"):
        await RedisCacheBackend().get("k")


@pytest.mark.asyncio
async def test_redis_ping():
    assert await IntelligenceCache(RedisCacheBackend(client=FakeRedis())).ping()
    assert not await IntelligenceCache(RedisCacheBackend(client=FakeRedis(fail=True))).ping()
    assert await IntelligenceCache(MemoryCacheBackend()).ping()


@pytest.mark.asyncio
async def test_injected_redis_client_is_not_closed():
    client = FakeRedis()
    cache = IntelligenceCache(RedisCacheBackend(client=client))

    await cache.close()

    assert not client.closed
