# tests/core/test_profile_registry.py
"""
Тесты для реестра профилей, подписок и справочника городов.
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from freedom.common.constants import SubscriptionState, UserRole, VerificationState
from freedom.core.geo.catalog import CityCatalog
from freedom.core.geo.models import City
from freedom.core.users.models import SubscriptionStatus
from freedom.core.users.registry import ProfileRegistry
from freedom.core.verification.models import VerificationStatus


class TestCityCatalog:
    """Тесты для справочника городов."""

    def test_default_is_first(self, catalog: CityCatalog) -> None:
        assert catalog.default.code == "ala"
        assert len(catalog) == 3

    def test_resolve_unknown_falls_back(self, catalog: CityCatalog) -> None:
        """Проверяет замену неизвестного кода городом по умолчанию."""
        assert catalog.resolve("ast").title == "Астана"
        assert catalog.resolve("zzz") == catalog.default
        assert catalog.get("zzz") is None

    def test_empty_catalog(self) -> None:
        with pytest.raises(ValueError):
            CityCatalog([])

    def test_duplicate_codes(self) -> None:
        with pytest.raises(ValueError):
            CityCatalog([City(code="ala", title="Алматы"), City(code="ala", title="Алма-Ата")])


class TestSubscriptionStatus:
    """Тесты для статуса подписки."""

    def test_trial_expires_after_window(self, clock) -> None:
        """Проверяет, что истёкший trial считается истёкшим."""
        status = SubscriptionStatus.trial(timedelta(hours=48), clock.now)

        assert not status.is_expired(clock.now + timedelta(hours=47))
        assert status.is_expired(clock.now + timedelta(hours=48))
        assert status.time_left(clock.now + timedelta(hours=50)) == timedelta(0)

    def test_active_never_expires(self, clock) -> None:
        status = SubscriptionStatus.active()
        assert not status.is_expired(clock.now + timedelta(days=365))
        assert status.time_left(clock.now) is None

    def test_expired(self, clock) -> None:
        assert SubscriptionStatus.expired(clock.now).is_expired(clock.now)


class TestProfileRegistry:
    """Тесты для ProfileRegistry."""

    @pytest.mark.asyncio
    async def test_ensure_profile_is_stable(self, registry: ProfileRegistry) -> None:
        """Проверяет, что повторный вызов возвращает тот же профиль."""
        await registry.set_phone("+77001234567")

        first = await registry.ensure_profile(UserRole.CLIENT)
        second = await registry.ensure_profile(UserRole.CLIENT)

        assert first.id == second.id
        assert first.display_name == "Клиент 4567"
        assert len(registry.profiles) == 1

    @pytest.mark.asyncio
    async def test_defaults_before_onboarding(self, registry: ProfileRegistry, catalog: CityCatalog) -> None:
        """Проверяет значения по умолчанию до ввода телефона и города."""
        profile = await registry.ensure_profile(UserRole.CLIENT)

        assert profile.phone == "+7"
        assert profile.selected_city == catalog.default

    @pytest.mark.asyncio
    async def test_executor_starts_with_trial(self, registry: ProfileRegistry, clock) -> None:
        """Проверяет начальные статусы исполнителя."""
        profile = await registry.ensure_profile(UserRole.EXECUTOR)

        assert profile.verification.state == VerificationState.NOT_SUBMITTED
        assert profile.subscription.state == SubscriptionState.TRIAL
        assert profile.subscription.started_at == clock.now
        assert profile.subscription.remaining == timedelta(hours=48)

    @pytest.mark.asyncio
    async def test_other_roles_are_approved(self, registry: ProfileRegistry) -> None:
        for role in (UserRole.CLIENT, UserRole.MODERATOR, UserRole.ADMIN):
            profile = await registry.ensure_profile(role)
            assert profile.verification.is_approved
            assert profile.subscription.state == SubscriptionState.ACTIVE

    @pytest.mark.asyncio
    async def test_city_change_propagates(self, registry: ProfileRegistry, catalog: CityCatalog) -> None:
        """Проверяет перенос города во все профили."""
        await registry.ensure_profile(UserRole.CLIENT)
        await registry.ensure_profile(UserRole.EXECUTOR)

        await registry.set_city(catalog.get("shy"))

        assert all(p.selected_city.code == "shy" for p in registry.profiles.values())

    @pytest.mark.asyncio
    async def test_phone_change_keeps_display_name(self, registry: ProfileRegistry) -> None:
        """Проверяет, что имя фиксируется при создании профиля."""
        await registry.set_phone("+77001234567")
        created = await registry.ensure_profile(UserRole.EXECUTOR)

        await registry.set_phone("+77009999999")
        updated = registry.get(UserRole.EXECUTOR)

        assert updated.phone == "+77009999999"
        assert updated.display_name == created.display_name
        assert updated.id == created.id

    @pytest.mark.asyncio
    async def test_set_verification_missing_profile(self, registry: ProfileRegistry) -> None:
        assert await registry.set_verification(UserRole.EXECUTOR, VerificationStatus.approved()) is None
        assert registry.profiles == {}

    @pytest.mark.asyncio
    async def test_set_subscription(self, registry: ProfileRegistry) -> None:
        await registry.ensure_profile(UserRole.EXECUTOR)

        profile = await registry.set_subscription(UserRole.EXECUTOR, SubscriptionStatus.active())

        assert profile.subscription.state == SubscriptionState.ACTIVE
        assert registry.get(UserRole.EXECUTOR) == profile
