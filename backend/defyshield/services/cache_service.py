"""In-memory TTL cache for analysis and score results."""

import logging
import time
from typing import Any, Callable, Optional

from cachetools import TTLCache

from defyshield.config import Settings, get_settings

logger = logging.getLogger(__name__)


class ResultCache:
    """TTL cache keyed by contract address (case-insensitive)."""

    def __init__(self, name: str, maxsize: int, ttl: float, timer: Callable[[], float] = time.monotonic):
        self.name = name
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)
        logger.info(f"Cache '{name}' initialized (maxsize={maxsize}, ttl={ttl}s)")

    @staticmethod
    def _key(address: str) -> str:
        return address.lower()

    def get(self, address: str) -> Optional[Any]:
        """Return the cached value, or None if missing or expired."""
        value = self._cache.get(self._key(address))
        if value is None:
            logger.debug(f"Cache '{self.name}' miss for key: {address}")
        else:
            logger.debug(f"Cache '{self.name}' hit for key: {address}")
        return value

    def set(self, address: str, value: Any) -> None:
        self._cache[self._key(address)] = value
        logger.debug(f"Cache '{self.name}' entry set for key: {address}")

    def delete(self, address: str) -> bool:
        removed = self._cache.pop(self._key(address), None) is not None
        logger.debug(f"Cache '{self.name}' entry deleted for key: {address}")
        return removed

    def clear(self) -> None:
        self._cache.clear()
        logger.debug(f"Cache '{self.name}' cleared")

    def __len__(self) -> int:
        return len(self._cache)


class AuditCache:
    """Analysis results and serialized score results, cached separately."""

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.analysis = ResultCache("analysis", settings.cache_max_entries, settings.cache_ttl_seconds)
        self.scores = ResultCache("scores", settings.cache_max_entries, settings.cache_ttl_seconds)

    def clear(self) -> None:
        self.analysis.clear()
        self.scores.clear()
