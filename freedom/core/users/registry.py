# freedom/core/users/registry.py
"""
Реестр профилей сессии.
Хранит ровно один профиль на роль и синхронизирует телефон и город.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from freedom.common.constants import TypeMsg, UserRole
from freedom.common.localization import get_text
from freedom.common.logger import log_debug, log_info
from freedom.core.geo.catalog import CityCatalog
from freedom.core.geo.models import City
from freedom.core.users.models import SubscriptionStatus, UserProfile
from freedom.core.verification.models import VerificationStatus
from freedom.infra.state_flow import StateFlow


Profiles = dict[UserRole, UserProfile]

_DISPLAY_NAME_KEYS = {
    UserRole.CLIENT: "PROFILE_CLIENT",
    UserRole.EXECUTOR: "PROFILE_EXECUTOR",
    UserRole.MODERATOR: "PROFILE_MODERATOR",
    UserRole.ADMIN: "PROFILE_ADMIN",
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProfileRegistry:
    """
    Реестр профилей (по одному на роль в рамках сессии).

    Профили не удаляются. Словарь профилей заменяется целиком при каждом
    изменении. Любое обращение через ensure_profile() обновляет телефон и
    город во всех существующих профилях текущими значениями сессии.
    """

    def __init__(
        self,
        catalog: CityCatalog,
        *,
        trial_hours: int = 48,
        language: str = "ru",
        default_phone: str = "+7",
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Args:
            catalog: Справочник городов (город по умолчанию — первый)
            trial_hours: Длительность пробного периода исполнителя
            language: Язык отображаемых имён
            default_phone: Телефон, пока пользователь его не ввёл
            clock: Источник текущего времени
        """
        self._catalog = catalog
        self._trial = timedelta(hours=trial_hours)
        self._language = language
        self._default_phone = default_phone
        self._clock = clock or utcnow

        self._phone: Optional[str] = None
        self._city: Optional[City] = None
        self._flow: StateFlow[Profiles] = StateFlow({}, name="profiles")

    # =========================================================================
    # ЧТЕНИЕ
    # =========================================================================

    @property
    def flow(self) -> StateFlow[Profiles]:
        """Наблюдаемый словарь профилей."""
        return self._flow

    @property
    def profiles(self) -> Profiles:
        """Копия словаря профилей."""
        return dict(self._flow.value)

    @property
    def phone(self) -> str:
        """Телефон сессии (или значение по умолчанию)."""
        return self._phone or self._default_phone

    @property
    def city(self) -> City:
        """Город сессии (или город по умолчанию)."""
        return self._city or self._catalog.default

    @property
    def trial_window(self) -> timedelta:
        return self._trial

    def get(self, role: UserRole) -> Optional[UserProfile]:
        """Возвращает профиль роли без создания."""
        return self._flow.value.get(role)

    # =========================================================================
    # ЗНАЧЕНИЯ СЕССИИ
    # =========================================================================

    async def set_phone(self, phone: str) -> None:
        """Запоминает телефон и переносит его во все профили."""
        self._phone = phone
        self._flow.update(self._refreshed)
        await log_debug(f"Телефон сессии обновлён: ***{phone[-4:]}")

    async def set_city(self, city: City) -> None:
        """Запоминает город и переносит его во все профили."""
        self._city = city
        self._flow.update(self._refreshed)
        await log_debug(f"Город сессии: {city.code}")

    # =========================================================================
    # ПРОФИЛИ
    # =========================================================================

    async def ensure_profile(self, role: UserRole) -> UserProfile:
        """
        Возвращает профиль роли, создавая его при первом обращении.

        Повторные вызовы возвращают тот же профиль (тот же id и имя).

        Args:
            role: Роль пользователя

        Returns:
            Профиль роли с актуальными телефоном и городом
        """
        created: list[UserProfile] = []

        def provision(profiles: Profiles) -> Profiles:
            refreshed = self._refreshed(profiles)
            if role not in refreshed:
                profile = self._new_profile(role)
                created.append(profile)
                refreshed = {**refreshed, role: profile}
            return refreshed

        self._flow.update(provision)

        if created:
            await log_info(
                f"Создан профиль {role.value}: {created[0].display_name}",
                type_msg=TypeMsg.INFO,
            )
        return self._flow.value[role]

    async def set_verification(self, role: UserRole, status: VerificationStatus) -> Optional[UserProfile]:
        """
        Записывает статус верификации в профиль роли.

        Returns:
            Обновлённый профиль или None, если профиля нет
        """
        profile = self._replace(role, verification=status)
        if profile is not None:
            await log_info(
                f"Верификация {profile.display_name}: {status.state.value}",
                type_msg=TypeMsg.INFO,
            )
        return profile

    async def set_subscription(self, role: UserRole, status: SubscriptionStatus) -> Optional[UserProfile]:
        """
        Записывает статус подписки в профиль роли.

        Returns:
            Обновлённый профиль или None, если профиля нет
        """
        profile = self._replace(role, subscription=status)
        if profile is not None:
            await log_info(
                f"Подписка {profile.display_name}: {status.state.value}",
                type_msg=TypeMsg.INFO,
            )
        return profile

    def fresh_trial(self) -> SubscriptionStatus:
        """Новый пробный период, начинающийся сейчас."""
        return SubscriptionStatus.trial(self._trial, self._clock())

    # =========================================================================
    # ВНУТРЕННИЕ МЕТОДЫ
    # =========================================================================

    def _refreshed(self, profiles: Profiles) -> Profiles:
        """Переносит телефон и город сессии во все профили."""
        phone, city = self.phone, self.city
        return {
            role: profile
            if profile.phone == phone and profile.selected_city == city
            else profile.model_copy(update={"phone": phone, "selected_city": city})
            for role, profile in profiles.items()
        }

    def _replace(self, role: UserRole, **changes) -> Optional[UserProfile]:
        """Атомарно заменяет поля профиля роли."""
        def apply(profiles: Profiles) -> Profiles:
            profile = profiles.get(role)
            if profile is None:
                return profiles
            return {**profiles, role: profile.model_copy(update=changes)}

        return self._flow.update(apply).get(role)

    def _new_profile(self, role: UserRole) -> UserProfile:
        """Создаёт профиль с детерминированным отображаемым именем."""
        phone = self.phone
        display_name = get_text(_DISPLAY_NAME_KEYS[role], self._language, suffix=phone[-4:])

        if role == UserRole.EXECUTOR:
            verification = VerificationStatus.not_submitted()
            subscription = self.fresh_trial()
        else:
            verification = VerificationStatus.approved()
            subscription = SubscriptionStatus.active()

        return UserProfile(
            phone=phone,
            role=role,
            selected_city=self.city,
            display_name=display_name,
            verification=verification,
            subscription=subscription,
        )
