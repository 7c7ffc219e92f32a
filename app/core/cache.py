import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Tuple

from app.core.config import DEFAULT_CACHE_TTL_SECONDS
from app.core.logger import get_logger
from app.core.models.domain import Activity

logger = get_logger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    value: Tuple[Activity, ...]
    expires_at: float


class ResultCache:
    """
    Per-source store of the last normalized batch, valid for a fixed TTL.

    Expiry is checked on read; there is no background sweeper since the
    number of keys equals the number of sources. Entries are replaced whole,
    so readers on the event loop never see a partial batch.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[Tuple[Activity, ...]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            logger.debug(f"Cache entry '{key}' expired")
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: Iterable[Activity]) -> None:
        self._entries[key] = CacheEntry(value=tuple(value), expires_at=self._clock() + self.ttl_seconds)

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
