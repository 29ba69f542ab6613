"""
Redis cache for derived course graph data
"""
import json
import logging
from datetime import timedelta
from typing import Any, Optional

from .interfaces.cache_service import CacheServiceInterface
from ..core.config import BaseSettings
from ..core.logging_config import get_component_logger


class RedisCacheService(CacheServiceInterface):
    """
    Stores JSON values under a key prefix.

    Redis failures are logged and reported as misses so the caller falls back
    to the graph store.
    """

    def __init__(
        self,
        redis_client,
        settings: BaseSettings,
        key_prefix: str = "degree_planner:",
        logger: Optional[logging.Logger] = None,
    ):
        self.redis = redis_client
        self.key_prefix = key_prefix
        self.ttl = timedelta(seconds=settings.cache_ttl_seconds)
        self.logger = get_component_logger(__name__, logger)

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def get(self, key: str) -> Optional[Any]:
        if self.redis is None:
            return None
        try:
            raw = await self.redis.get(self._key(key))
        except Exception as e:
            self.logger.warning(f"Redis read of {key} failed: {e}")
            return None
        return None if raw is None else json.loads(raw)

    async def set(
        self, key: str, value: Any, expire: Optional[timedelta] = None
    ) -> bool:
        if self.redis is None:
            return False
        ttl = expire or self.ttl
        try:
            await self.redis.set(
                self._key(key), json.dumps(value), ex=int(ttl.total_seconds())
            )
        except Exception as e:
            self.logger.warning(f"Redis write of {key} failed: {e}")
            return False
        return True

    async def delete(self, key: str) -> bool:
        if self.redis is None:
            return False
        try:
            return await self.redis.delete(self._key(key)) > 0
        except Exception as e:
            self.logger.warning(f"Redis delete of {key} failed: {e}")
            return False

    async def ping(self) -> bool:
        if self.redis is None:
            return False
        return bool(await self.redis.ping())
