"""TTL-based insight cache over persistent key-value storage."""

import time
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Optional, Union

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError

from ..config import get_settings
from ..errors import StorageError
from .storage import create_storage

logger = logging.getLogger(__name__)

KEY_PREFIX = "ai_cache_"
DEFAULT_TTL_MS = 1000 * 60 * 60  # 1 hour


@dataclass(frozen=True)
class Text:
    """A single-insight cache value."""
    value: str


@dataclass(frozen=True)
class Tips:
    """A multi-tip cache value."""
    value: tuple[str, ...]


CachedValue = Union[Text, Tips]


class CacheEntry(BaseModel):
    """Serialized form of a cache entry."""
    data: Union[str, list[str]]
    timestamp: int

    def as_value(self, kind: type) -> Optional[CachedValue]:
        """Decode ``data`` as ``kind``; None when the shape does not match."""
        if kind is Text and isinstance(self.data, str):
            return Text(self.data)
        if kind is Tips and isinstance(self.data, list):
            return Tips(tuple(self.data))
        return None


def now_ms() -> int:
    return int(time.time() * 1000)


class InsightCache:
    """Best-effort cache of generated insights.

    Entries are JSON ``{"data", "timestamp"}`` stored under
    ``ai_cache_<key>``. Storage failures never escape: reads degrade to a
    miss and writes are dropped with a warning.
    """

    def __init__(
        self,
        storage,
        ttl_ms: int = DEFAULT_TTL_MS,
        clock: Callable[[], int] = now_ms,
    ):
        self.storage = storage
        self.ttl_ms = ttl_ms
        self._clock = clock

    @staticmethod
    def storage_key(key: str) -> str:
        return f"{KEY_PREFIX}{key}"

    def get(self, key: str, kind: type) -> Optional[CachedValue]:
        """Get cached value of the given kind if present and not expired."""
        storage_key = self.storage_key(key)
        try:
            raw = self.storage.get_item(storage_key)
        except StorageError as e:
            logger.warning("insight_cache_read_failed", extra={"key": key, "err": str(e)})
            return None

        if raw is None:
            return None

        try:
            entry = CacheEntry.model_validate_json(raw)
        except ValidationError:
            logger.debug("insight_cache_malformed", extra={"key": key})
            self._discard(storage_key)
            return None

        if self._clock() - entry.timestamp > self.ttl_ms:
            # Expired
            self._discard(storage_key)
            return None

        return entry.as_value(kind)

    def set(self, key: str, value: CachedValue) -> None:
        """Store a value stamped with the current time."""
        data = value.value if isinstance(value, Text) else list(value.value)
        try:
            payload = CacheEntry(data=data, timestamp=self._clock()).model_dump_json()
            self.storage.set_item(self.storage_key(key), payload)
        except (StorageError, PydanticSerializationError, ValueError) as e:
            logger.warning("insight_cache_write_failed", extra={"key": key, "err": str(e)})

    def invalidate(self, key: str) -> None:
        """Invalidate a cache entry."""
        self._discard(self.storage_key(key))

    def clear(self) -> int:
        """Remove every insight entry; returns how many were removed."""
        try:
            keys = [k for k in self.storage.keys() if k.startswith(KEY_PREFIX)]
        except StorageError as e:
            logger.warning("insight_cache_clear_failed", extra={"err": str(e)})
            return 0

        removed = 0
        for storage_key in keys:
            if self._discard(storage_key):
                removed += 1
        return removed

    def _discard(self, storage_key: str) -> bool:
        try:
            self.storage.remove_item(storage_key)
            return True
        except StorageError as e:
            logger.warning("insight_cache_evict_failed", extra={"key": storage_key, "err": str(e)})
            return False


@lru_cache()
def get_insight_cache() -> InsightCache:
    """Get the process-wide cache built from settings."""
    settings = get_settings()
    return InsightCache(
        storage=create_storage(settings.cache_db_path),
        ttl_ms=settings.cache_ttl_ms,
    )
