# freedom/services/session/projector.py
"""
Проектор состояния сессии.
Подписывается на все хранилища и публикует единый снимок AppUiState.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from freedom.common.constants import OrderStatus, UserRole
from freedom.common.logger import get_logger
from freedom.core.banners.models import NotificationBanner
from freedom.core.banners.service import BannerBroadcaster
from freedom.core.orders.models import Order
from freedom.core.orders.store import OrderStore
from freedom.core.users.models import UserProfile
from freedom.core.users.registry import ProfileRegistry
from freedom.core.verification.models import VerificationRequest
from freedom.core.verification.queue import VerificationQueue
from freedom.infra.state_flow import StateFlow
from freedom.services.session.state import AppUiState

logger = get_logger("state_projector")


def available_orders_for(orders: tuple[Order, ...], executor: Optional[UserProfile]) -> tuple[Order, ...]:
    """
    Заказы, доступные исполнителю: все PENDING плюс его собственные
    незавершённые. Порядок входной коллекции сохраняется.
    """
    name = executor.display_name if executor is not None else None
    return tuple(
        order for order in orders
        if order.status == OrderStatus.PENDING
        or (name is not None and order.executor_name == name and not order.is_terminal)
    )


def assigned_orders_for(orders: tuple[Order, ...], executor: Optional[UserProfile]) -> tuple[Order, ...]:
    """Все заказы исполнителя, включая завершённые и отменённые."""
    if executor is None:
        return ()
    return tuple(order for order in orders if order.executor_name == executor.display_name)


def project_state(
    state: AppUiState,
    orders: tuple[Order, ...],
    requests: tuple[VerificationRequest, ...],
    banners: tuple[NotificationBanner, ...],
    safe_mode: bool,
    profiles: dict[UserRole, UserProfile],
) -> AppUiState:
    """Пересчитывает производные срезы снимка. Срезы сессии не трогает."""
    client_profile = profiles.get(UserRole.CLIENT)
    executor_profile = profiles.get(UserRole.EXECUTOR)

    executor_update = {
        "profile": executor_profile,
        "available_orders": available_orders_for(orders, executor_profile),
        "assigned_orders": assigned_orders_for(orders, executor_profile),
    }
    if executor_profile is not None:
        executor_update["verification_status"] = executor_profile.verification
        executor_update["subscription_status"] = executor_profile.subscription

    return state.model_copy(update={
        "client": state.client.model_copy(update={"profile": client_profile, "orders": orders}),
        "executor": state.executor.model_copy(update=executor_update),
        "moderator": state.moderator.model_copy(update={"pending_requests": requests}),
        "admin": state.admin.model_copy(update={"safe_mode_enabled": safe_mode, "banners": banners}),
    })


class StateProjector:
    """
    Единая последовательная подписка на все хранилища.

    На каждое изменение любого хранилища выполняется ровно один пересчёт:
    под блокировкой проектора читаются текущие значения всех хранилищ,
    и снимок заменяется одним update(). Смесь старых и новых срезов
    не публикуется.
    """

    def __init__(
        self,
        orders: OrderStore,
        verification_queue: VerificationQueue,
        banners: BannerBroadcaster,
        registry: ProfileRegistry,
        initial: Optional[AppUiState] = None,
    ) -> None:
        self._orders = orders
        self._queue = verification_queue
        self._banners = banners
        self._registry = registry

        self._state: StateFlow[AppUiState] = StateFlow(initial or AppUiState(), name="app_state")
        self._lock = threading.RLock()
        self._unsubscribers: list[Callable[[], None]] = []
        self._recomputations = 0

    @property
    def flow(self) -> StateFlow[AppUiState]:
        """Наблюдаемый снимок."""
        return self._state

    @property
    def state(self) -> AppUiState:
        """Текущий снимок."""
        return self._state.value

    @property
    def recomputations(self) -> int:
        """Количество выполненных пересчётов."""
        return self._recomputations

    @property
    def is_running(self) -> bool:
        return bool(self._unsubscribers)

    def start(self) -> None:
        """Подписывается на хранилища и выполняет начальный пересчёт."""
        with self._lock:
            if self._unsubscribers:
                return

            upstream = (
                self._orders.flow,
                self._queue.flow,
                self._banners.flow,
                self._registry.flow,
            )
            for flow in upstream:
                self._unsubscribers.append(flow.subscribe(self._on_upstream, emit_current=False))

            self._recompute()
        logger.debug(f"Проектор запущен, источников: {len(self._unsubscribers)}")

    def stop(self) -> None:
        """Отписывается от хранилищ. Последний снимок остаётся доступен."""
        with self._lock:
            for unsubscribe in self._unsubscribers:
                unsubscribe()
            self._unsubscribers.clear()
        logger.debug("Проектор остановлен")

    def update(self, transform: Callable[[AppUiState], AppUiState]) -> AppUiState:
        """Атомарно меняет срезы сессии (телефон, роль, событие и т.п.)."""
        return self._state.update(transform)

    def _on_upstream(self, _value: object) -> None:
        self._recompute()

    def _recompute(self) -> None:
        with self._lock:
            orders = self._orders.orders
            requests = self._queue.pending
            broadcast = self._banners.flow.value
            banners, safe_mode = broadcast.banners, broadcast.safe_mode
            profiles = self._registry.profiles

            self._recomputations += 1
            self._state.update(
                lambda state: project_state(state, orders, requests, banners, safe_mode, profiles)
            )
