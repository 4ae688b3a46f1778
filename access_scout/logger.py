"""Логирование AccessScout.

Все модули пишут в один логгер ``"AccessScout"``::

    from access_scout.logger import logger
    logger.info("Обход начат")

Пока CLI не вызвал :func:`init_logging`, логгер молчит (``NullHandler``).
Вывод идёт в stderr, поэтому JSON-отчёт команды ``scan`` остаётся в stdout.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "AccessScout"

LOG_MAX_BYTES: Final[int] = 2 * 1024 * 1024
LOG_BACKUPS: Final[int] = 5

Level = Union[int, str]


def _build_handlers(log_file: str | Path | None, fmt: str) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                Path(log_file),
                maxBytes=LOG_MAX_BYTES,
                backupCount=LOG_BACKUPS,
                encoding="utf-8",
            )
        )
    formatter = logging.Formatter(fmt)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure(
    *,
    level: Level = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Настраивает логгер проекта: stderr плюс, если задан ``log_file``, файл с ротацией.

    При ``replace_handlers=False`` новые обработчики добавляются к прежним.
    """
    project_logger = logging.getLogger(LOGGER_NAME)
    project_logger.setLevel(level)

    if replace_handlers:
        for old in project_logger.handlers[:]:
            project_logger.removeHandler(old)
            old.close()

    for handler in _build_handlers(log_file, log_format):
        project_logger.addHandler(handler)

    project_logger.propagate = False
    return project_logger


def init_logging(
    level: Level = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Точка входа для CLI."""
    return configure(level=level, log_file=log_file, log_format=log_format)


logger: logging.Logger = logging.getLogger(LOGGER_NAME)
logger.addHandler(logging.NullHandler())

__all__ = ["logger", "configure", "init_logging", "LOGGER_NAME", "DEFAULT_FORMAT"]
