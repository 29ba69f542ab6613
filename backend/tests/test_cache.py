"""
Tests for the in-memory and Redis cache services
"""
import json
from datetime import timedelta
from unittest.mock import AsyncMock

from degree_planner.services.cache_service import RedisCacheService
from degree_planner.services.memory_cache_service import MemoryCacheService


async def test_memory_cache_round_trip_is_isolated(cache_service):
    value = {"MAT1001": {"prerequisites": [], "dependents": ["MAT2001"]}}
    await cache_service.set("course_relationships", value)

    value["MAT1001"]["dependents"].append("mutated")
    cached = await cache_service.get("course_relationships")
    cached["MAT1001"]["prerequisites"].append("mutated")

    assert await cache_service.get("course_relationships") == {
        "MAT1001": {"prerequisites": [], "dependents": ["MAT2001"]}
    }


async def test_memory_cache_expiry(cache_service):
    await cache_service.set("short", 1, expire=timedelta(seconds=-1))
    assert await cache_service.get("short") is None


async def test_memory_cache_delete(cache_service):
    await cache_service.set("course_relationships", {})

    assert await cache_service.delete("course_relationships") is True
    assert await cache_service.delete("course_relationships") is False
    assert await cache_service.get("course_relationships") is None
    assert await cache_service.ping() is True


async def test_redis_cache_stores_json_with_prefix(settings):
    redis_client = AsyncMock()
    redis_client.get.return_value = json.dumps({"a": [1, 2]})
    cache = RedisCacheService(redis_client, settings)

    assert await cache.set("course_relationships", {"a": [1, 2]})
    redis_client.set.assert_awaited_once_with(
        "degree_planner:course_relationships",
        json.dumps({"a": [1, 2]}),
        ex=settings.cache_ttl_seconds,
    )
    assert await cache.get("course_relationships") == {"a": [1, 2]}
    redis_client.get.assert_awaited_with("degree_planner:course_relationships")


async def test_redis_cache_explicit_expiry(settings):
    redis_client = AsyncMock()
    cache = RedisCacheService(redis_client, settings)

    await cache.set("course_relationships", [], expire=timedelta(minutes=2))

    assert redis_client.set.await_args.kwargs["ex"] == 120


async def test_redis_cache_delete(settings):
    redis_client = AsyncMock()
    redis_client.delete.return_value = 1
    cache = RedisCacheService(redis_client, settings)

    assert await cache.delete("course_relationships") is True
    redis_client.delete.assert_awaited_once_with("degree_planner:course_relationships")


async def test_redis_cache_errors_are_misses(settings):
    redis_client = AsyncMock()
    redis_client.get.side_effect = ConnectionError("down")
    redis_client.delete.side_effect = ConnectionError("down")
    cache = RedisCacheService(redis_client, settings)

    assert await cache.get("course_relationships") is None
    assert await cache.delete("course_relationships") is False


async def test_redis_cache_without_client(settings):
    cache = RedisCacheService(None, settings)

    assert await cache.get("key") is None
    assert await cache.set("key", 1) is False
    assert await cache.ping() is False


def test_memory_cache_uses_configured_ttl(settings):
    assert MemoryCacheService(settings).default_expire == timedelta(
        seconds=settings.cache_ttl_seconds
    )
