"""
Модуль для загрузки и валидации конфигурации PageDumper.
Используется Pydantic для описания схемы и проверки данных.

``DumpOptions`` описывает один дамп страницы, ``DumperConfig`` описывает сессию
браузера (профиль, таймауты, блоклист).
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from page_dumper.paths import PathPolicy

MIN_SETTLE_TIME = 2000
MAX_SETTLE_TIME = 60000
DEFAULT_SETTLE_TIME = 2500

DEFAULT_USER_AGENT = "Mozilla/5.0 ( ; ; rv:121.0) Gecko/20100101 Firefox/121.0"
DEFAULT_BLOCKLIST_URL = "https://raw.githubusercontent.com/StevenBlack/hosts/master/hosts"


class DumpOptions(BaseModel):
    """Параметры одного дампа страницы."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    settle_time: int = Field(
        DEFAULT_SETTLE_TIME,
        description="Пауза после загрузки (мс), ограничена [2000, 60000].",
    )
    path_policy: PathPolicy = Field(PathPolicy.PRESERVE, description="preserve | anonymize.")
    cross_origin: bool = Field(True, description="Сохранять ресурсы с чужих origin.")

    @field_validator("settle_time", mode="before")
    def _clamp_settle_time(cls, v: Any) -> int:
        # 0 / None fall back to the default, like an unset option
        if not v:
            return DEFAULT_SETTLE_TIME
        return min(max(int(v), MIN_SETTLE_TIME), MAX_SETTLE_TIME)


class DumperConfig(BaseModel):
    """Конфигурация сессии браузера."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    headless: bool = Field(True, description="Запуск браузера без окна.")
    browser_channel: Optional[str] = Field(None, description="Канал Chromium (chrome, msedge…).")
    executable_path: Optional[Path] = Field(None, description="Путь к бинарнику браузера.")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    viewport_width: int = Field(1280, gt=0)
    viewport_height: int = Field(720, gt=0)
    navigation_timeout: int = Field(10000, gt=0, description="Таймаут навигации (мс).")
    request_timeout: float = Field(10.0, gt=0, description="Таймаут одного перехваченного запроса (сек).")
    blocklist_url: Optional[str] = Field(
        DEFAULT_BLOCKLIST_URL, description="hosts-файл с рекламными/трекинговыми доменами."
    )
    blocklist_file: Optional[Path] = Field(
        Path("local/hosts.txt"), description="Локальный кэш блоклиста."
    )
    options: DumpOptions = Field(default_factory=DumpOptions)


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


def load_config(path: Union[str, Path, None]) -> DumperConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект DumperConfig.
    Без явного пути берёт configs/default.yaml, а если его нет — значения по умолчанию.
    Для явно указанного, но отсутствующего файла FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return DumperConfig()
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

    return DumperConfig(**data)


__all__ = [
    "DumpOptions",
    "DumperConfig",
    "load_config",
    "MIN_SETTLE_TIME",
    "MAX_SETTLE_TIME",
    "DEFAULT_SETTLE_TIME",
]
