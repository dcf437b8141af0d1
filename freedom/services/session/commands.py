# freedom/services/session/commands.py
"""
Обработчик команд сессии.
Проверяет допуск ролей, вызывает хранилища и формирует уведомления.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from pydantic import ValidationError

from freedom.common.constants import OrderType, TypeMsg, UiEventKind, UserRole
from freedom.common.localization import get_text
from freedom.common.logger import log_error, log_info, log_warning
from freedom.core.banners.service import BannerBroadcaster
from freedom.core.geo.catalog import CityCatalog
from freedom.core.orders.models import Order, OrderCreateDTO
from freedom.core.orders.store import OrderStore
from freedom.core.users.models import SubscriptionStatus, UserProfile
from freedom.core.users.registry import ProfileRegistry
from freedom.core.verification.models import VerificationRequest, VerificationStatus
from freedom.core.verification.queue import VerificationQueue
from freedom.services.session.projector import StateProjector
from freedom.services.session.state import UiEvent


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CommandHandler:
    """
    Обработчик команд всех ролей.

    Команды выполняются синхронно относительно вызывающего (await) и не
    бросают исключений: отказ оформляется уведомлением UiEvent, состояние
    при этом не меняется. Результат также возвращается вызывающему.
    """

    def __init__(
        self,
        orders: OrderStore,
        verification_queue: VerificationQueue,
        banners: BannerBroadcaster,
        registry: ProfileRegistry,
        catalog: CityCatalog,
        projector: StateProjector,
        *,
        language: str = "ru",
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._orders = orders
        self._queue = verification_queue
        self._banners = banners
        self._registry = registry
        self._catalog = catalog
        self._projector = projector
        self._language = language
        self._clock = clock or utcnow

    # =========================================================================
    # ОНБОРДИНГ
    # =========================================================================

    async def submit_phone(self, phone: str) -> None:
        """Запоминает телефон и переносит его во все профили."""
        await self._registry.set_phone(phone)
        self._projector.update(lambda state: state.model_copy(update={
            "phone": phone,
            "is_onboarding_complete": state.selected_city is not None,
        }))

    async def select_city(self, city_code: str) -> None:
        """Выбирает город; неизвестный код заменяется городом по умолчанию."""
        city = self._catalog.resolve(city_code)
        if city.code != city_code:
            await log_warning(f"Неизвестный код города {city_code!r}, выбран {city.code}")

        await self._registry.set_city(city)
        self._projector.update(lambda state: state.model_copy(update={
            "selected_city": city,
            "is_onboarding_complete": state.phone is not None,
        }))

    async def select_role(self, role: UserRole) -> UserProfile:
        """Выбирает роль и создаёт её профиль при необходимости."""
        profile = await self._registry.ensure_profile(role)
        self._projector.update(lambda state: state.model_copy(update={"selected_role": role}))
        return profile

    # =========================================================================
    # ЗАКАЗЫ
    # =========================================================================

    async def create_order(
        self,
        type: OrderType,
        pickup: str,
        drop_off: Optional[str],
        budget: int,
        note: str,
    ) -> Optional[Order]:
        """
        Публикует заказ от имени клиента.

        Returns:
            Созданный заказ или None, если данные не прошли проверку
        """
        try:
            dto = OrderCreateDTO(type=type, pickup=pickup, drop_off=drop_off, budget=budget, note=note)
        except ValidationError as e:
            await log_warning(f"Некорректные данные заказа: {e.error_count()} ошибок")
            self._emit(UiEventKind.INVALID_INPUT, "ORDER_INVALID")
            return None

        try:
            profile = await self._registry.ensure_profile(UserRole.CLIENT)
            order = await self._orders.create(profile, dto)
        except Exception as e:
            await log_error(f"Ошибка создания заказа: {e}", exc_info=True)
            return None

        event = self._event(UiEventKind.SUCCESS, "ORDER_PUBLISHED", city=order.city.title)
        self._projector.update(lambda state: state.model_copy(update={
            "selected_role": UserRole.CLIENT,
            "client": state.client.model_copy(update={"last_created_order_id": order.id}),
            "event": event,
        }))
        return order

    async def claim_order(self, order_id: str) -> Optional[Order]:
        """
        Закрепляет заказ за текущим исполнителем.

        Без одобренной верификации или с истёкшей подпиской заказ не
        трогается. Если заказ уже взят или не найден — уведомление о конфликте.

        Returns:
            Закреплённый заказ или None
        """
        try:
            profile = await self._registry.ensure_profile(UserRole.EXECUTOR)

            if not profile.verification.is_approved:
                await log_info(
                    f"{profile.display_name}: заказ {order_id} отклонён, нет верификации",
                    type_msg=TypeMsg.WARNING,
                )
                self._emit(UiEventKind.NOT_ELIGIBLE, "VERIFICATION_REQUIRED")
                return None

            if profile.subscription.is_expired(self._clock()):
                await log_info(
                    f"{profile.display_name}: заказ {order_id} отклонён, подписка истекла",
                    type_msg=TypeMsg.WARNING,
                )
                self._emit(UiEventKind.NOT_ELIGIBLE, "SUBSCRIPTION_EXPIRED")
                return None

            claimed = await self._orders.claim(order_id, profile)
        except Exception as e:
            await log_error(f"Ошибка закрепления заказа {order_id}: {e}", exc_info=True)
            return None

        if claimed is None:
            self._emit(UiEventKind.CONFLICT, "ORDER_ALREADY_TAKEN")
            return None

        self._emit(UiEventKind.SUCCESS, "ORDER_CLAIMED")
        return claimed

    async def advance_order(self, order_id: str) -> Optional[Order]:
        """Переводит заказ на следующий статус; для неизвестного ID молча ничего не делает."""
        updated = await self._orders.advance(order_id)
        if updated is not None:
            self._emit(UiEventKind.INFO, "ORDER_STATUS_UPDATED", status=updated.status.name)
        return updated

    async def cancel_order(self, order_id: str) -> Optional[Order]:
        """Отменяет заказ; для неизвестного ID молча ничего не делает."""
        cancelled = await self._orders.cancel(order_id)
        if cancelled is not None:
            self._emit(UiEventKind.INFO, "ORDER_CANCELLED")
        return cancelled

    # =========================================================================
    # ВЕРИФИКАЦИЯ
    # =========================================================================

    async def submit_verification(self, attachments: Iterable[str]) -> Optional[VerificationRequest]:
        """
        Отправляет документы исполнителя на модерацию.

        Два последовательных шага без транзакции: сначала профиль получает
        статус Pending, затем заявка попадает в очередь. Сбой между шагами
        оставит профиль в Pending без заявки в очереди.

        Returns:
            Созданная заявка или None при сбое
        """
        try:
            await self._registry.ensure_profile(UserRole.EXECUTOR)
            profile = await self._registry.set_verification(UserRole.EXECUTOR, VerificationStatus.pending())
            request = await self._queue.submit(profile, attachments)
        except Exception as e:
            await log_error(f"Ошибка отправки документов на верификацию: {e}", exc_info=True)
            return None

        event = self._event(UiEventKind.SUCCESS, "VERIFICATION_SUBMITTED")
        self._projector.update(lambda state: state.model_copy(update={
            "executor": state.executor.model_copy(update={"last_submitted_request_id": request.id}),
            "event": event,
        }))
        return request

    async def review_verification(self, request_id: str, approved: bool) -> Optional[VerificationStatus]:
        """
        Решение модератора по заявке.

        Если заявка есть в очереди и это последняя поданная текущим
        исполнителем, решение записывается в его профиль. Повторное решение
        по уже снятой заявке профиль не трогает. Уведомление формируется всегда.

        Returns:
            Решение (для неизвестной заявки — отказ «Не найдено») или None при сбое
        """
        state = self._projector.state
        moderator_name = state.moderator.moderator_name
        known = self._queue.get(request_id) is not None

        try:
            decision = await self._queue.review(request_id, approved, moderator_name)
            if known and state.executor.last_submitted_request_id == request_id:
                await self._registry.set_verification(UserRole.EXECUTOR, decision)
        except Exception as e:
            await log_error(f"Ошибка модерации заявки {request_id}: {e}", exc_info=True)
            return None

        if not known:
            self._emit(UiEventKind.NOT_FOUND, "REQUEST_REJECTED")
        elif decision.is_approved:
            self._emit(UiEventKind.SUCCESS, "EXECUTOR_APPROVED")
        else:
            self._emit(UiEventKind.INFO, "REQUEST_REJECTED")
        return decision

    # =========================================================================
    # АДМИНИСТРИРОВАНИЕ И ПОДПИСКА
    # =========================================================================

    async def set_safe_mode(self, enabled: bool) -> None:
        """Включает или выключает режим обслуживания."""
        await self._banners.set_safe_mode(enabled)

    async def activate_subscription(self) -> SubscriptionStatus:
        """Активирует подписку текущего исполнителя."""
        status = SubscriptionStatus.active()
        await self._registry.ensure_profile(UserRole.EXECUTOR)
        await self._registry.set_subscription(UserRole.EXECUTOR, status)
        self._emit(UiEventKind.SUCCESS, "SUBSCRIPTION_ACTIVATED")
        return status

    async def renew_trial(self) -> SubscriptionStatus:
        """Начинает новый пробный период исполнителя с текущего момента."""
        await self._registry.ensure_profile(UserRole.EXECUTOR)
        status = self._registry.fresh_trial()
        await self._registry.set_subscription(UserRole.EXECUTOR, status)
        self._emit(UiEventKind.SUCCESS, "TRIAL_RENEWED")
        return status

    # =========================================================================
    # УВЕДОМЛЕНИЯ
    # =========================================================================

    def acknowledge_event(self, event_id: Optional[str] = None) -> None:
        """
        Снимает текущее уведомление.

        Если передан event_id, снимается только уведомление с этим ID:
        более новое уведомление не теряется.
        """
        def clear(state):
            if state.event is None:
                return state
            if event_id is not None and state.event.id != event_id:
                return state
            return state.model_copy(update={"event": None})

        self._projector.update(clear)

    def _event(self, kind: UiEventKind, key: str, **kwargs) -> UiEvent:
        return UiEvent(kind=kind, message=get_text(key, self._language, **kwargs))

    def _emit(self, kind: UiEventKind, key: str, **kwargs) -> UiEvent:
        """Публикует уведомление, вытесняя предыдущее."""
        event = self._event(kind, key, **kwargs)
        self._projector.update(lambda state: state.model_copy(update={"event": event}))
        return event
