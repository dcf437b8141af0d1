# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest

from freedom.common.constants import UserRole
from freedom.config.loader import Settings
from freedom.core.banners.service import BannerBroadcaster
from freedom.core.geo.catalog import CityCatalog
from freedom.core.geo.models import City
from freedom.core.orders.store import OrderStore
from freedom.core.users.models import UserProfile
from freedom.core.users.registry import ProfileRegistry
from freedom.core.verification.models import VerificationStatus
from freedom.core.verification.queue import VerificationQueue
from freedom.services.session.app import MarketplaceSession


class FakeClock:
    """Управляемые часы для тестов со сроками."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> None:
        self.now = self.now + timedelta(**kwargs)


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    """Путь к файлу конфигурации."""
    return project_root / "config" / "config.json"


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Мок конфигурации для тестов."""
    return {
        "_comment_system": "комментарий",
        "PROJECT_NAME": "freedom_test",
        "VERSION": "1.0.0-test",
        "DEBUG": True,
        "ENVIRONMENT": "test",
        "LOG_LEVEL": "DEBUG",
        "LOG_TO_FILE": False,
        "LOG_FORMAT": "colored",
        "DEFAULT_LANGUAGE": "ru",
        "SUPPORTED_LANGUAGES": ["ru", "kk", "en"],
        "DEFAULT_PHONE_PREFIX": "+7",
        "CITIES": [
            {"code": "ala", "title": "Алматы"},
            {"code": "ast", "title": "Астана"},
        ],
        "TRIAL_HOURS": 48,
        "SEED_DEMO_ORDERS": False,
        "MODERATOR_NAME": "Айгерим",
    }


@pytest.fixture
def test_settings(mock_config: dict[str, Any], monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Настройки из мок-конфигурации без влияния окружения."""
    for name in ("ENVIRONMENT", "LOG_LEVEL", "LOG_FORMAT", "DEFAULT_LANGUAGE"):
        monkeypatch.delenv(name, raising=False)
    return Settings.from_dict(mock_config)


# =============================================================================
# ФИКСТУРЫ ДОМЕНА
# =============================================================================

@pytest.fixture
def clock() -> FakeClock:
    """Часы, стоящие на фиксированном моменте."""
    return FakeClock(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def catalog() -> CityCatalog:
    """Справочник из трёх городов."""
    return CityCatalog([
        City(code="ala", title="Алматы"),
        City(code="ast", title="Астана"),
        City(code="shy", title="Шымкент"),
    ])


@pytest.fixture
def registry(catalog: CityCatalog, clock: FakeClock) -> ProfileRegistry:
    return ProfileRegistry(catalog, trial_hours=48, clock=clock)


@pytest.fixture
def order_store(clock: FakeClock) -> OrderStore:
    return OrderStore(clock=clock)


@pytest.fixture
def verification_queue(clock: FakeClock) -> VerificationQueue:
    return VerificationQueue(clock=clock)


@pytest.fixture
def broadcaster() -> BannerBroadcaster:
    return BannerBroadcaster()


@pytest.fixture
def client_profile(catalog: CityCatalog) -> UserProfile:
    """Профиль клиента в Алматы."""
    return UserProfile(
        phone="+77001234567",
        role=UserRole.CLIENT,
        selected_city=catalog.get("ala"),
        display_name="Клиент 4567",
        verification=VerificationStatus.approved(),
    )


@pytest.fixture
def executor_profile(catalog: CityCatalog) -> UserProfile:
    """Верифицированный исполнитель."""
    return UserProfile(
        phone="+77007654321",
        role=UserRole.EXECUTOR,
        selected_city=catalog.get("ala"),
        display_name="Исполнитель 4321",
        verification=VerificationStatus.approved(),
    )


@pytest.fixture
def session(test_settings: Settings, catalog: CityCatalog, clock: FakeClock) -> MarketplaceSession:
    """Сессия маркетплейса с управляемыми часами."""
    marketplace = MarketplaceSession(test_settings, catalog=catalog, clock=clock)
    yield marketplace
    marketplace.close()


@pytest.fixture
async def onboarded_session(session: MarketplaceSession) -> MarketplaceSession:
    """Сессия после ввода телефона и выбора города."""
    await session.submit_phone("+77001234567")
    await session.select_city("ala")
    return session
