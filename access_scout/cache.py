# File: access_scout/cache.py
"""access_scout.cache: Кеш результатов анализа с фиксированным временем жизни."""

from __future__ import annotations

import time
from typing import Callable, Dict, Generic, Optional, Tuple, TypeVar

from access_scout.logger import logger

T = TypeVar("T")


class ResultCache(Generic[T]):
    """Результат по нормализованному URL, действительный ``ttl`` секунд.

    Часы передаются снаружи, чтобы тесты могли управлять временем.
    """

    def __init__(self, ttl: float = 600.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._items: Dict[str, Tuple[float, T]] = {}

    def get(self, url: str) -> Optional[T]:
        item = self._items.get(url)
        if item is None:
            return None
        stored_at, value = item
        if self._clock() - stored_at < self.ttl:
            logger.info("Cache hit for %s", url)
            return value
        del self._items[url]
        return None

    def set(self, url: str, value: T) -> None:
        self._items[url] = (self._clock(), value)
        logger.debug("Cached result for %s", url)

    def invalidate(self, url: str) -> None:
        self._items.pop(url, None)

    def __len__(self) -> int:
        return len(self._items)
