# access_scout/crawler/limiter.py
"""
Admission control for concurrent fetches.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")


class ConcurrencyLimiter:
    """Runs at most ``limit`` coroutines at a time.

    Waiters are admitted in FIFO order (:class:`asyncio.Semaphore` keeps its
    waiters in a queue). A slot is released whether the task returns, raises
    or is cancelled.
    """

    def __init__(self, limit: int = 5) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        self.limit = limit
        self._semaphore = asyncio.Semaphore(limit)
        self.active = 0
        self.peak = 0

    async def run(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        async with self._semaphore:
            self.active += 1
            self.peak = max(self.peak, self.active)
            try:
                return await func(*args, **kwargs)
            finally:
                self.active -= 1

    def __repr__(self) -> str:
        return f"<ConcurrencyLimiter limit={self.limit} active={self.active}>"
