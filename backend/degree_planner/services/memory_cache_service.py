"""
In-process cache used by the in-memory backend and the tests
"""
import copy
import threading
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from .interfaces.cache_service import CacheServiceInterface


class MemoryCacheService(CacheServiceInterface):
    """Dict cache holding deep copies with a per-entry deadline"""

    def __init__(self, settings):
        self.entries: Dict[str, Tuple[Any, datetime]] = {}
        self.lock = threading.RLock()
        self.default_expire = timedelta(seconds=settings.cache_ttl_seconds)

    async def get(self, key: str) -> Optional[Any]:
        with self.lock:
            entry = self.entries.get(key)
            if entry is None:
                return None
            value, deadline = entry
            if deadline <= datetime.utcnow():
                del self.entries[key]
                return None
            # Callers must not be able to mutate the stored value
            return copy.deepcopy(value)

    async def set(
        self, key: str, value: Any, expire: Optional[timedelta] = None
    ) -> bool:
        deadline = datetime.utcnow() + (expire or self.default_expire)
        with self.lock:
            self.entries[key] = (copy.deepcopy(value), deadline)
        return True

    async def delete(self, key: str) -> bool:
        with self.lock:
            return self.entries.pop(key, None) is not None

    async def ping(self) -> bool:
        return True
