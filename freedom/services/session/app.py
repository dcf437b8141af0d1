# freedom/services/session/app.py
"""
Сессия маркетплейса.
Собирает хранилища, реестр, проектор и обработчик команд в один объект.
"""

from __future__ import annotations

from datetime import datetime
from typing import AsyncIterator, Callable, Iterable, Optional

from freedom.common.constants import OrderType, TypeMsg, UserRole
from freedom.common.logger import log_info
from freedom.config.loader import Settings
from freedom.core.banners.service import BannerBroadcaster
from freedom.core.geo.catalog import CityCatalog
from freedom.core.orders.models import Order
from freedom.core.orders.store import OrderStore
from freedom.core.users.models import SubscriptionStatus, UserProfile
from freedom.core.users.registry import ProfileRegistry
from freedom.core.verification.models import VerificationRequest, VerificationStatus
from freedom.core.verification.queue import VerificationQueue
from freedom.services.session.commands import CommandHandler
from freedom.services.session.projector import StateProjector
from freedom.services.session.state import AppUiState, ModeratorDashboardState


class MarketplaceSession:
    """
    Точка входа для слоя представления.

    Предоставляет поверхность команд и наблюдаемый снимок AppUiState.
    Каждая сессия владеет собственным набором хранилищ: состояние
    живёт только в памяти процесса.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        catalog: Optional[CityCatalog] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Args:
            settings: Настройки (по умолчанию — глобальный синглтон)
            catalog: Справочник городов (по умолчанию — из настроек)
            clock: Источник текущего времени для всех компонентов
        """
        if settings is None:
            from freedom.config import settings as global_settings
            settings = global_settings

        self._settings = settings
        language = settings.domain.DEFAULT_LANGUAGE

        self.catalog = catalog or CityCatalog.from_settings(settings)
        self.orders = OrderStore(clock=clock)
        self.verification_queue = VerificationQueue(clock=clock, language=language)
        self.banners = BannerBroadcaster(language=language)
        self.registry = ProfileRegistry(
            self.catalog,
            trial_hours=settings.session.TRIAL_HOURS,
            language=language,
            default_phone=settings.domain.DEFAULT_PHONE_PREFIX,
            clock=clock,
        )

        self.projector = StateProjector(
            self.orders,
            self.verification_queue,
            self.banners,
            self.registry,
            initial=AppUiState(
                available_cities=self.catalog.cities,
                moderator=ModeratorDashboardState(moderator_name=settings.session.MODERATOR_NAME),
            ),
        )
        self.commands = CommandHandler(
            self.orders,
            self.verification_queue,
            self.banners,
            self.registry,
            self.catalog,
            self.projector,
            language=language,
            clock=clock,
        )
        self.projector.start()

    @classmethod
    async def create(
        cls,
        settings: Optional[Settings] = None,
        *,
        catalog: Optional[CityCatalog] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "MarketplaceSession":
        """Создаёт сессию и при SEED_DEMO_ORDERS добавляет демо-заказы."""
        session = cls(settings, catalog=catalog, clock=clock)
        if session._settings.session.SEED_DEMO_ORDERS:
            await session.orders.seed_demo_orders(session.catalog)
        await log_info(
            f"Сессия создана: городов {len(session.catalog)}, заказов {len(session.orders.orders)}",
            type_msg=TypeMsg.DEBUG,
        )
        return session

    async def __aenter__(self) -> "MarketplaceSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Отключает проектор от хранилищ."""
        self.projector.stop()

    # =========================================================================
    # СНИМОК
    # =========================================================================

    @property
    def state(self) -> AppUiState:
        """Текущий снимок."""
        return self.projector.state

    def subscribe(self, listener: Callable[[AppUiState], None]) -> Callable[[], None]:
        """Подписка на снимки; текущий снимок передаётся сразу."""
        return self.projector.flow.subscribe(listener)

    def watch(self) -> AsyncIterator[AppUiState]:
        """Асинхронный поток снимков."""
        return self.projector.flow.watch()

    # =========================================================================
    # КОМАНДЫ
    # =========================================================================

    async def submit_phone(self, phone: str) -> None:
        await self.commands.submit_phone(phone)

    async def select_city(self, city_code: str) -> None:
        await self.commands.select_city(city_code)

    async def select_role(self, role: UserRole) -> UserProfile:
        return await self.commands.select_role(role)

    async def create_order(
        self,
        type: OrderType,
        pickup: str,
        drop_off: Optional[str],
        budget: int,
        note: str = "",
    ) -> Optional[Order]:
        return await self.commands.create_order(type, pickup, drop_off, budget, note)

    async def claim_order(self, order_id: str) -> Optional[Order]:
        return await self.commands.claim_order(order_id)

    async def advance_order(self, order_id: str) -> Optional[Order]:
        return await self.commands.advance_order(order_id)

    async def cancel_order(self, order_id: str) -> Optional[Order]:
        return await self.commands.cancel_order(order_id)

    async def submit_verification(self, attachments: Iterable[str]) -> Optional[VerificationRequest]:
        return await self.commands.submit_verification(attachments)

    async def review_verification(self, request_id: str, approved: bool) -> Optional[VerificationStatus]:
        return await self.commands.review_verification(request_id, approved)

    async def set_safe_mode(self, enabled: bool) -> None:
        await self.commands.set_safe_mode(enabled)

    async def activate_subscription(self) -> SubscriptionStatus:
        return await self.commands.activate_subscription()

    async def renew_trial(self) -> SubscriptionStatus:
        return await self.commands.renew_trial()

    def acknowledge_event(self, event_id: Optional[str] = None) -> None:
        self.commands.acknowledge_event(event_id)
