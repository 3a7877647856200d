"""
Redis caching for the upcoming-schedule listing.

What we cache:
  - The paginated "schedules departing from today" listing, JSON-serialized
  - Key pattern: "schedules:list:from={today}&page={page}&size={size}"

Invalidation:
  - After every committed booking or cancellation (seat counts changed)
  - After a schedule is opened
  - TTL expiry as a safety net

What we never cache:
  - Per-schedule availability peeks. Customers look at those right before
    booking, so they are always read from the database.

Redis is optional: when it is disabled or unreachable every call degrades to
a cache miss / no-op and the database answers.
"""

import json
from datetime import date
from typing import Optional

import redis.asyncio as redis
from rail_reservation.core.config import get_settings
from rail_reservation.core.logging import get_logger
from rail_reservation.core.metrics import record_cache_operation, redis_connection_errors

logger = get_logger(__name__)
settings = get_settings()

SCHEDULE_LIST_PREFIX = "schedules:list:"

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled or down."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
        )
        try:
            await client.ping()
        except redis.RedisError as e:
            redis_connection_errors.inc()
            logger.error("redis_connection_failed", error=str(e))
            await client.aclose()
            return None
        _redis_client = client
        logger.info("redis_connected", url=settings.REDIS_URL)

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def _make_schedule_list_key(today: date, page: int, page_size: int) -> str:
    return f"{SCHEDULE_LIST_PREFIX}from={today.isoformat()}&page={page}&size={page_size}"


async def get_cached_schedules(today: date, page: int, page_size: int) -> Optional[dict]:
    client = await get_redis()
    if not client:
        return None

    key = _make_schedule_list_key(today, page, page_size)
    try:
        data = await client.get(key)
    except redis.RedisError as e:
        logger.error("cache_get_error", key=key, error=str(e))
        return None

    record_cache_operation("get", "hit" if data is not None else "miss")
    if data:
        logger.debug("cache_hit", key=key)
        return json.loads(data)
    logger.debug("cache_miss", key=key)
    return None


async def set_cached_schedules(today: date, page: int, page_size: int, data: dict) -> None:
    client = await get_redis()
    if not client:
        return

    key = _make_schedule_list_key(today, page, page_size)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        record_cache_operation("set", "stored")
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except redis.RedisError as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_schedule_cache() -> None:
    """Drop every cached listing page; SCAN keeps this non-blocking for Redis."""
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"{SCHEDULE_LIST_PREFIX}*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", keys_deleted=deleted)
    except redis.RedisError as e:
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for the health endpoint."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
    except redis.RedisError as e:
        return {"status": "error", "error": str(e)}

    hits = info.get("keyspace_hits", 0)
    misses = info.get("keyspace_misses", 0)
    return {
        "status": "connected",
        "hits": hits,
        "misses": misses,
        "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
    }
