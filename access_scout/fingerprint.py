# File: access_scout/fingerprint.py
"""access_scout.fingerprint: Отпечатки метрик и сравнение с предыдущим сканированием.

Хеш не криптографический: он нужен только чтобы быстро увидеть, изменилось
ли что-нибудь между двумя сканированиями одного сайта.
"""

from __future__ import annotations

import string
import zlib
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterator, Optional

from access_scout.aggregator import SiteMetrics

__all__ = [
    "FingerprintMetrics",
    "ScanFingerprint",
    "MetricChange",
    "ScanChanges",
    "FingerprintStore",
    "compute_fingerprint",
    "diff_fingerprints",
    "trend",
]

_ALPHABET = string.digits + string.ascii_lowercase


@dataclass(slots=True, frozen=True)
class FingerprintMetrics:
    """Пять отслеживаемых счётчиков, порядок полей фиксирован."""

    total_images: int
    missing_alt: int
    total_controls: int
    unlabeled_controls: int
    total_links: int

    @classmethod
    def from_site(cls, metrics: SiteMetrics) -> FingerprintMetrics:
        return cls(
            total_images=metrics.images_total,
            missing_alt=metrics.images_missing_alt,
            total_controls=metrics.controls_total,
            unlabeled_controls=metrics.controls_unlabeled,
            total_links=metrics.links_total,
        )

    def as_tuple(self) -> tuple[int, int, int, int, int]:
        return (
            self.total_images,
            self.missing_alt,
            self.total_controls,
            self.unlabeled_controls,
            self.total_links,
        )


@dataclass(slots=True, frozen=True)
class ScanFingerprint:
    hash: str
    timestamp: str
    metrics: FingerprintMetrics


@dataclass(slots=True, frozen=True)
class MetricChange:
    before: int
    after: int
    delta: int


@dataclass(slots=True, frozen=True)
class ScanChanges:
    missing_alt: MetricChange
    unlabeled_controls: MetricChange


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


def _digest(metrics: FingerprintMetrics) -> str:
    payload = ":".join(str(n) for n in metrics.as_tuple()).encode("ascii")
    return _base36(zlib.crc32(payload))


def compute_fingerprint(
    metrics: SiteMetrics | FingerprintMetrics, *, now: Optional[datetime] = None
) -> ScanFingerprint:
    """Отпечаток пяти счётчиков; одинаковые счётчики дают одинаковый хеш."""
    vector = metrics if isinstance(metrics, FingerprintMetrics) else FingerprintMetrics.from_site(metrics)
    stamp = (now or datetime.now(timezone.utc)).isoformat()
    return ScanFingerprint(hash=_digest(vector), timestamp=stamp, metrics=vector)


def _change(before: int, after: int) -> MetricChange:
    return MetricChange(before=before, after=after, delta=after - before)


def diff_fingerprints(
    previous: Optional[ScanFingerprint], current: ScanFingerprint
) -> Optional[ScanChanges]:
    """None означает первое сканирование без базовой линии."""
    if previous is None:
        return None
    return ScanChanges(
        missing_alt=_change(previous.metrics.missing_alt, current.metrics.missing_alt),
        unlabeled_controls=_change(
            previous.metrics.unlabeled_controls, current.metrics.unlabeled_controls
        ),
    )


def trend(change: MetricChange) -> str:
    """IMPROVED / REGRESSED / STABLE: меньше дефектов значит лучше."""
    if change.delta < 0:
        return "IMPROVED"
    if change.delta > 0:
        return "REGRESSED"
    return "STABLE"


class FingerprintStore:
    """Последний отпечаток на нормализованный URL сайта, только в памяти процесса.

    Передаётся в движок явно, поэтому тесты и разные клиенты получают
    независимые хранилища.
    """

    def __init__(self) -> None:
        self._items: Dict[str, ScanFingerprint] = {}

    def get(self, url: str) -> Optional[ScanFingerprint]:
        return self._items.get(url)

    def put(self, url: str, fingerprint: ScanFingerprint) -> Optional[ScanFingerprint]:
        """Сохраняет отпечаток и возвращает предыдущий (last write wins)."""
        previous = self._items.get(url)
        self._items[url] = fingerprint
        return previous

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, url: object) -> bool:
        return url in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)
