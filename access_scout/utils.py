# File: access_scout/utils.py
"""access_scout.utils: Утилиты для нормализации и разбора URL."""

from __future__ import annotations

import re
from typing import List, Sequence
from urllib.parse import urldefrag, urlparse, urlunparse

from access_scout.errors import InvalidInput
from access_scout.logger import logger

__all__: Sequence[str] = (
    "normalize_target",
    "canonical_url",
    "path_segments",
    "extract_domain",
)

_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*)://")
_HTTP_SCHEMES = ("http", "https")


def normalize_target(raw: str) -> str:
    """Приводит ввод пользователя к абсолютному http(s) URL.

    Голое имя хоста получает префикс ``https://``. Любая другая схема,
    отсутствующий хост или некорректный порт дают :class:`InvalidInput`.
    """
    if raw is None or not str(raw).strip():
        raise InvalidInput("URL cannot be empty.")
    trimmed = str(raw).strip()

    match = _SCHEME_RE.match(trimmed)
    if match is None:
        trimmed = f"https://{trimmed}"
    elif match.group(1).lower() not in _HTTP_SCHEMES:
        raise InvalidInput("Only http/https URLs are supported.")

    try:
        parsed = urlparse(trimmed)
        hostname = parsed.hostname
        parsed.port  # noqa: B018 - raises ValueError on a bad port
    except ValueError as exc:
        raise InvalidInput(f"Invalid URL: {exc}") from exc
    if not hostname or any(ch.isspace() for ch in trimmed):
        raise InvalidInput("Invalid URL format: missing or malformed domain.")

    normalized = urlunparse(
        (parsed.scheme.lower(), parsed.netloc.lower(), parsed.path or "/", "", parsed.query, "")
    )
    logger.debug("Normalized target: %s -> %s", raw, normalized)
    return normalized


def canonical_url(url: str) -> str:
    """Ключ для дедупликации: без фрагмента, схема и хост в нижнем регистре, путь не пустой."""
    parsed = urlparse(urldefrag(url)[0])
    return urlunparse(
        (parsed.scheme.lower(), parsed.netloc.lower(), parsed.path or "/", parsed.params, parsed.query, "")
    )


def path_segments(url: str) -> List[str]:
    """Непустые сегменты пути URL."""
    return [segment for segment in urlparse(url).path.split("/") if segment]


def extract_domain(url: str) -> str:
    """Возвращает имя хоста из URL в нижнем регистре (без порта)."""
    return (urlparse(url).hostname or "").lower()

