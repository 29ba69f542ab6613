"""
Cache service interface
"""
from abc import ABC, abstractmethod
from typing import Any, Optional
from datetime import timedelta


class CacheServiceInterface(ABC):
    """Key/value cache for derived graph data such as the relationship map"""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Cached value, or None on a miss"""
        pass

    @abstractmethod
    async def set(
        self, key: str, value: Any, expire: Optional[timedelta] = None
    ) -> bool:
        """Store a JSON-compatible value; ``expire`` overrides the configured TTL"""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Drop a key; True if it was present"""
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """Check the backing store is reachable"""
        pass
