# freedom/config/loader.py
"""
Загрузчик конфигурации проекта.
Единственный источник истины — config/config.json.
Отдельные значения переопределяются из переменных окружения.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


# =============================================================================
# ОПРЕДЕЛЕНИЕ ПУТЕЙ
# =============================================================================

def get_project_root() -> Path:
    """Возвращает корневую директорию проекта."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Возвращает путь к файлу конфигурации."""
    return get_project_root() / "config" / "config.json"


def load_config_json() -> dict[str, Any]:
    """Загружает config.json и возвращает словарь."""
    config_path = get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Файл конфигурации не найден: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        return json.load(f)


# =============================================================================
# PYDANTIC МОДЕЛИ КОНФИГУРАЦИИ
# =============================================================================

class SystemSettings(BaseModel):
    """Системные настройки."""
    PROJECT_NAME: str = "freedom"
    VERSION: str = "0.1.0"
    DEBUG: bool = True
    ENVIRONMENT: str = "development"


class LoggingSettings(BaseModel):
    """Настройки логирования."""
    LOG_LEVEL: str = "DEBUG"
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: str = "logs/app.log"
    LOG_FORMAT: str = "colored"
    LOG_MAX_BYTES: int = 10485760

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Допускаются только форматы json и colored."""
        if v not in ("json", "colored"):
            raise ValueError(f"Неизвестный формат логов: {v}")
        return v


class CityEntry(BaseModel):
    """Запись справочника городов."""
    code: str
    title: str


def _default_cities() -> list[CityEntry]:
    return [
        CityEntry(code="ala", title="Алматы"),
        CityEntry(code="ast", title="Астана"),
        CityEntry(code="shy", title="Шымкент"),
        CityEntry(code="akt", title="Актобе"),
    ]


class DomainSettings(BaseModel):
    """Настройки локализации и справочника городов."""
    DEFAULT_LANGUAGE: str = "ru"
    SUPPORTED_LANGUAGES: list[str] = Field(default_factory=lambda: ["ru", "kk", "en"])
    DEFAULT_PHONE_PREFIX: str = "+7"
    CITIES: list[CityEntry] = Field(default_factory=_default_cities)

    @field_validator("CITIES")
    @classmethod
    def validate_cities(cls, v: list[CityEntry]) -> list[CityEntry]:
        """Справочник не пуст, коды городов уникальны."""
        if not v:
            raise ValueError("Справочник городов не может быть пустым")
        codes = [city.code for city in v]
        if len(codes) != len(set(codes)):
            raise ValueError("Коды городов должны быть уникальными")
        return v


class SessionSettings(BaseModel):
    """Параметры сессии маркетплейса."""
    TRIAL_HOURS: int = Field(48, gt=0)
    SEED_DEMO_ORDERS: bool = False
    MODERATOR_NAME: str = "Айгерим"


# =============================================================================
# ГЛАВНЫЙ КЛАСС НАСТРОЕК
# =============================================================================

class Settings(BaseSettings):
    """
    Главный класс настроек приложения.
    Агрегирует все секции конфигурации.
    """
    system: SystemSettings = Field(default_factory=SystemSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    domain: DomainSettings = Field(default_factory=DomainSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @classmethod
    def from_dict(cls, config_data: dict[str, Any]) -> "Settings":
        """
        Создаёт объект Settings из плоского словаря (формат config.json).
        Переменные окружения имеют приоритет для ENVIRONMENT, LOG_LEVEL и LOG_FORMAT.
        """
        # Фильтруем комментарии (ключи, начинающиеся с _comment_)
        data = {k: v for k, v in config_data.items() if not k.startswith("_comment_")}

        return cls(
            system=SystemSettings(
                PROJECT_NAME=data.get("PROJECT_NAME", "freedom"),
                VERSION=data.get("VERSION", "0.1.0"),
                DEBUG=data.get("DEBUG", True),
                ENVIRONMENT=os.getenv("ENVIRONMENT", data.get("ENVIRONMENT", "development")),
            ),
            logging=LoggingSettings(
                LOG_LEVEL=os.getenv("LOG_LEVEL", data.get("LOG_LEVEL", "DEBUG")),
                LOG_TO_FILE=data.get("LOG_TO_FILE", False),
                LOG_FILE_PATH=data.get("LOG_FILE_PATH", "logs/app.log"),
                LOG_FORMAT=os.getenv("LOG_FORMAT", data.get("LOG_FORMAT", "colored")),
                LOG_MAX_BYTES=data.get("LOG_MAX_BYTES", 10485760),
            ),
            domain=DomainSettings(
                DEFAULT_LANGUAGE=os.getenv("DEFAULT_LANGUAGE", data.get("DEFAULT_LANGUAGE", "ru")),
                SUPPORTED_LANGUAGES=data.get("SUPPORTED_LANGUAGES", ["ru", "kk", "en"]),
                DEFAULT_PHONE_PREFIX=data.get("DEFAULT_PHONE_PREFIX", "+7"),
                CITIES=data.get("CITIES") or _default_cities(),
            ),
            session=SessionSettings(
                TRIAL_HOURS=data.get("TRIAL_HOURS", 48),
                SEED_DEMO_ORDERS=data.get("SEED_DEMO_ORDERS", False),
                MODERATOR_NAME=data.get("MODERATOR_NAME", "Айгерим"),
            ),
        )

    @classmethod
    def from_config_json(cls) -> "Settings":
        """Создаёт объект Settings из config.json."""
        return cls.from_dict(load_config_json())


@lru_cache()
def get_settings() -> Settings:
    """
    Возвращает синглтон настроек приложения.
    Перед чтением config.json подгружает .env из корня проекта.
    """
    from dotenv import load_dotenv

    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Settings.from_config_json()


# Экспорт синглтона для удобного импорта
settings = get_settings()
