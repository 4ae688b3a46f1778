"""
Модуль для загрузки и валидации конфигурации сканера AccessScout.
Используется Pydantic для описания схемы и проверки данных.

Все пороги эвристик (ключевые слова, глубина пути, порог приёма в frontier)
вынесены сюда, чтобы поведение настраивалось без правки алгоритма.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

__all__ = ["ScoringPolicy", "CrawlSettings", "ScannerConfig", "load_config"]


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0"
)


class ScoringPolicy(BaseModel):
    """Константы приоритизации ссылок для frontier."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    keywords: tuple[str, ...] = Field(
        ("contact", "help", "apply", "login", "search", "pay", "form", "register"),
        description="Ключевые слова в пути, повышающие приоритет страницы.",
    )
    file_extensions: tuple[str, ...] = Field(
        (
            "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx",
            "jpg", "jpeg", "png", "gif", "svg", "webp",
            "zip", "rar", "gz", "exe", "dmg",
        ),
        description="Расширения не-HTML ресурсов, которые никогда не обходятся.",
    )
    keyword_bonus: int = 3
    depth_bonus: int = 2
    min_bonus_depth: int = Field(2, ge=1)
    max_bonus_depth: int = Field(4, ge=1)
    deep_threshold: int = Field(6, ge=1, description="Глубина, после которой начисляется штраф.")
    deep_penalty: int = 1
    query_penalty: int = 1
    fragment_penalty: int = -3
    file_penalty: int = -5
    malformed_penalty: int = -10
    min_score: int = Field(0, description="Порог приёма кандидата в frontier (score >= min_score).")

    @field_validator("keywords", "file_extensions", mode="before")
    def _lowercase(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return tuple(str(item).lower().lstrip(".") for item in v)
        return v

    @model_validator(mode="after")
    def _check_depth_window(self) -> ScoringPolicy:
        if self.min_bonus_depth > self.max_bonus_depth:
            raise ValueError("min_bonus_depth must not exceed max_bonus_depth")
        return self


class CrawlSettings(BaseModel):
    """Бюджеты и лимиты одного обхода сайта."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_pages: int = Field(50, ge=1, description="Жесткий лимит по числу страниц.")
    total_timeout: float = Field(12.0, gt=0, description="Общий бюджет обхода (секунд).")
    page_timeout: float = Field(5.0, gt=0, description="Таймаут на один запрос (секунд).")
    concurrency: int = Field(5, ge=1, description="Максимум одновременных загрузок.")
    soft_cutoff_ratio: float = Field(
        0.8, gt=0, le=1, description="Доля бюджета, после которой новые страницы не ставятся в очередь."
    )
    fallback_timeout: float = Field(30.0, gt=0, description="Таймаут повторной загрузки корня.")
    fallback_delay: float = Field(2.0, ge=0, description="Пауза перед повторной загрузкой корня.")
    max_body_bytes: int = Field(1_000_000, ge=1, description="Потолок размера тела ответа.")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    skip_paths: tuple[str, ...] = Field(
        ("/logout", "/admin", "/wp-admin", "/signin", "/user/logout"),
        description="Фрагменты пути, которые обходчик никогда не посещает.",
    )


class ScannerConfig(BaseModel):
    """Конфигурация для одного запуска сканирования."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    crawl: CrawlSettings = Field(default_factory=CrawlSettings)
    scoring: ScoringPolicy = Field(default_factory=ScoringPolicy)
    worst_pages_limit: int = Field(5, ge=1, description="Сколько худших страниц выводить.")
    sample_links_limit: int = Field(5, ge=0, description="Сколько ссылок каждого типа показывать.")
    cache_ttl: float = Field(600.0, ge=0, description="Время жизни кеша результатов (секунд).")
    html_parser: str = Field("lxml", min_length=1, description="Парсер BeautifulSoup.")

    def with_overrides(self, **crawl_updates: Any) -> ScannerConfig:
        """Возвращает копию с изменёнными полями ``crawl`` (None игнорируется)."""
        updates = {k: v for k, v in crawl_updates.items() if v is not None}
        if not updates:
            return self
        crawl = CrawlSettings(**{**self.crawl.model_dump(), **updates})
        return self.model_copy(update={"crawl": crawl})


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> ScannerConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект ScannerConfig.
    При отсутствии файла конфига бросает FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    try:
        return ScannerConfig(**data)
    except ValidationError:
        raise
