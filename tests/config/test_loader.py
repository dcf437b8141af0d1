# tests/config/test_loader.py
"""
Тесты для модуля загрузки конфигурации.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from freedom.config.loader import (
    DomainSettings,
    LoggingSettings,
    SessionSettings,
    Settings,
    get_config_path,
    get_project_root,
    load_config_json,
)


class TestPaths:
    """Тесты для функций путей."""

    def test_root_contains_package(self) -> None:
        """Проверяет наличие пакета freedom в корне."""
        assert (get_project_root() / "freedom").exists()

    def test_config_path(self, config_path: Path) -> None:
        assert get_config_path() == config_path

    def test_load_config_json(self) -> None:
        data = load_config_json()
        assert data["PROJECT_NAME"] == "freedom"

    def test_missing_config(self) -> None:
        with patch("freedom.config.loader.get_config_path", return_value=Path("/nonexistent/config.json")):
            with pytest.raises(FileNotFoundError):
                load_config_json()


class TestSections:
    """Тесты для секций конфигурации."""

    def test_log_format_validated(self) -> None:
        with pytest.raises(ValidationError):
            LoggingSettings(LOG_FORMAT="xml")

    def test_default_cities(self) -> None:
        codes = [city.code for city in DomainSettings().CITIES]
        assert codes == ["ala", "ast", "shy", "akt"]

    def test_duplicate_city_codes(self) -> None:
        with pytest.raises(ValidationError):
            DomainSettings(CITIES=[{"code": "ala", "title": "A"}, {"code": "ala", "title": "B"}])

    def test_trial_hours_positive(self) -> None:
        with pytest.raises(ValidationError):
            SessionSettings(TRIAL_HOURS=0)


class TestSettings:
    """Тесты для Settings.from_dict."""

    def test_from_dict(self, test_settings: Settings) -> None:
        """Проверяет разбор плоского словаря по секциям."""
        assert test_settings.system.PROJECT_NAME == "freedom_test"
        assert test_settings.system.ENVIRONMENT == "test"
        assert test_settings.domain.DEFAULT_LANGUAGE == "ru"
        assert [city.code for city in test_settings.domain.CITIES] == ["ala", "ast"]
        assert test_settings.session.TRIAL_HOURS == 48
        assert test_settings.session.MODERATOR_NAME == "Айгерим"

    def test_env_overrides(self, mock_config: dict[str, Any], monkeypatch: pytest.MonkeyPatch) -> None:
        """Проверяет приоритет переменных окружения."""
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("LOG_FORMAT", "json")
        monkeypatch.setenv("DEFAULT_LANGUAGE", "kk")

        settings = Settings.from_dict(mock_config)

        assert settings.system.ENVIRONMENT == "production"
        assert settings.logging.LOG_FORMAT == "json"
        assert settings.domain.DEFAULT_LANGUAGE == "kk"

    def test_defaults_for_missing_keys(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("ENVIRONMENT", "LOG_LEVEL", "LOG_FORMAT", "DEFAULT_LANGUAGE"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_dict({})

        assert settings.system.PROJECT_NAME == "freedom"
        assert settings.session.SEED_DEMO_ORDERS is False
        assert len(settings.domain.CITIES) == 4

    def test_from_config_json(self) -> None:
        settings = Settings.from_config_json()
        assert settings.domain.CITIES[0].code == "ala"
