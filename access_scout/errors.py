# File: access_scout/errors.py
"""access_scout.errors: Иерархия исключений сканера доступности.

Только :class:`InvalidInput` и :class:`CrawlExhausted` доходят до вызывающего
кода; остальные ошибки перехватываются на границе обработки страницы.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "ScanError",
    "InvalidInput",
    "FetchFailed",
    "FetchTimeout",
    "ParseFailure",
    "CrawlExhausted",
]


class ScanError(Exception):
    """Базовый класс для всех ошибок AccessScout."""


class InvalidInput(ScanError, ValueError):
    """Целевой URL не разбирается или использует схему, отличную от http(s)."""


class FetchFailed(ScanError):
    """Страница вернула не-2xx статус, не-HTML содержимое или сетевую ошибку."""

    def __init__(
        self,
        url: str,
        reason: str,
        *,
        status: Optional[int] = None,
        content_type: Optional[str] = None,
    ) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
        self.status = status
        self.content_type = content_type


class FetchTimeout(ScanError, TimeoutError):
    """Запрос не уложился в отведённый таймаут."""

    def __init__(self, url: str, timeout: float) -> None:
        super().__init__(f"{url}: no response within {timeout:.1f}s")
        self.url = url
        self.timeout = timeout


class ParseFailure(ScanError):
    """Разметку страницы не удалось разобрать."""

    def __init__(self, url: str, cause: BaseException) -> None:
        super().__init__(f"{url}: {cause}")
        self.url = url


class CrawlExhausted(ScanError):
    """Ни обход, ни повторная загрузка корня не дали ни одной страницы.

    ``reason`` равен ``"timeout"`` либо ``"blocked"``, чтобы вызывающий код
    мог подсказать пользователю, что делать дальше.
    """

    TIMEOUT = "timeout"
    BLOCKED = "blocked"

    _MESSAGES = {
        TIMEOUT: "Request timed out. The site took too long to respond. Try again in a moment.",
        BLOCKED: (
            "No pages could be fetched from the site. The site may be blocking "
            "automated requests or temporarily unavailable."
        ),
    }

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(self._MESSAGES.get(reason, self._MESSAGES[self.BLOCKED]))
        self.url = url
        self.reason = reason
