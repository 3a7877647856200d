"""
Tests for the schedule listing cache and its metrics, against an in-memory stand-in for Redis.
"""

from datetime import date

import pytest
from prometheus_client import REGISTRY

from rail_reservation.services import cache_service


class InMemoryRedis:
    def __init__(self):
        self.store = {}

    async def get(self, key):
        return self.store.get(key)

    async def setex(self, key, ttl, value):
        self.store[key] = value


def cache_count(operation: str, result: str) -> float:
    value = REGISTRY.get_sample_value(
        "rail_cache_operations_total", {"operation": operation, "result": result}
    )
    return value or 0.0


@pytest.fixture
def redis_stub(monkeypatch) -> InMemoryRedis:
    client = InMemoryRedis()

    async def fake_get_redis():
        return client

    monkeypatch.setattr(cache_service, "get_redis", fake_get_redis)
    return client


@pytest.mark.asyncio
async def test_cache_write_is_not_counted_as_miss(redis_stub):
    stored_before = cache_count("set", "stored")
    set_misses_before = cache_count("set", "miss")

    await cache_service.set_cached_schedules(date(2030, 1, 1), 1, 20, {"schedules": [], "total": 0})

    assert cache_count("set", "stored") == stored_before + 1
    assert cache_count("set", "miss") == set_misses_before
    assert len(redis_stub.store) == 1


@pytest.mark.asyncio
async def test_cache_get_records_hit_and_miss(redis_stub):
    today = date(2030, 1, 1)
    hits_before = cache_count("get", "hit")
    misses_before = cache_count("get", "miss")

    assert await cache_service.get_cached_schedules(today, 1, 20) is None
    await cache_service.set_cached_schedules(today, 1, 20, {"schedules": [], "total": 0})
    assert await cache_service.get_cached_schedules(today, 1, 20) == {"schedules": [], "total": 0}

    assert cache_count("get", "miss") == misses_before + 1
    assert cache_count("get", "hit") == hits_before + 1


@pytest.mark.asyncio
async def test_cache_disabled_is_a_miss_without_metrics():
    misses_before = cache_count("get", "miss")
    assert await cache_service.get_cached_schedules(date(2030, 1, 1), 1, 20) is None
    assert cache_count("get", "miss") == misses_before
