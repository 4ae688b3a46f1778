# access_scout/crawler/frontier.py
"""
Priority frontier backed by a binary max-heap.

Entries come out highest score first; equal scores come out in insertion
order, which makes the visiting order deterministic.
"""
from __future__ import annotations

import heapq
import itertools
from typing import Iterator, List, Tuple

from access_scout.crawler.models import FrontierEntry


class Frontier:
    """Max-priority queue of :class:`FrontierEntry` objects."""

    def __init__(self) -> None:
        self._heap: List[Tuple[int, int, FrontierEntry]] = []
        self._counter = itertools.count()

    def push(self, url: str, score: int) -> FrontierEntry:
        entry = FrontierEntry(url=url, score=score)
        # heapq is a min-heap: negate the score, the counter keeps FIFO for ties
        heapq.heappush(self._heap, (-score, next(self._counter), entry))
        return entry

    def pop(self) -> FrontierEntry:
        """Remove and return the best entry; IndexError when empty."""
        return heapq.heappop(self._heap)[2]

    def drain(self) -> Tuple[FrontierEntry, ...]:
        """Empty the frontier, returning the leftovers in priority order."""
        left = tuple(item[2] for item in sorted(self._heap))
        self._heap.clear()
        return left

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def __iter__(self) -> Iterator[FrontierEntry]:
        return (item[2] for item in sorted(self._heap))
