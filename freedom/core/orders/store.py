# freedom/core/orders/store.py
"""
Хранилище заказов.
Единственный владелец коллекции заказов, реализует переходы жизненного цикла.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from freedom.common.constants import OrderStatus, OrderType, TypeMsg
from freedom.common.logger import log_info
from freedom.core.geo.catalog import CityCatalog
from freedom.core.orders.models import Order, OrderCreateDTO
from freedom.core.orders.state_machine import OrderStateMachine
from freedom.core.users.models import UserProfile
from freedom.infra.state_flow import StateFlow


Clock = Callable[[], datetime]

# Преобразование заказа: новый заказ, тот же заказ (без изменений) или None (отказ)
OrderTransform = Callable[[Order], Optional[Order]]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStore:
    """
    Хранилище заказов.

    Коллекция хранится как кортеж (новые заказы первыми) и заменяется целиком
    при каждом изменении. Заказы никогда не удаляются: отмена — это статус.
    Ошибки «не найден» и «недопустимый статус» возвращаются как None.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._flow: StateFlow[tuple[Order, ...]] = StateFlow((), name="orders")
        self._clock = clock or utcnow

    @property
    def flow(self) -> StateFlow[tuple[Order, ...]]:
        """Наблюдаемая коллекция заказов."""
        return self._flow

    @property
    def orders(self) -> tuple[Order, ...]:
        """Текущий снимок коллекции."""
        return self._flow.value

    def get(self, order_id: str) -> Optional[Order]:
        """Возвращает заказ по ID или None."""
        return next((order for order in self._flow.value if order.id == order_id), None)

    # =========================================================================
    # ЖИЗНЕННЫЙ ЦИКЛ ЗАКАЗА
    # =========================================================================

    async def create(self, profile: UserProfile, dto: OrderCreateDTO) -> Order:
        """
        Создаёт заказ от имени клиента.

        Args:
            profile: Профиль клиента (город и имя берутся из него)
            dto: Данные заказа

        Returns:
            Новый заказ в статусе PENDING
        """
        order = Order(
            type=dto.type,
            city=profile.selected_city,
            pickup_address=dto.pickup,
            drop_off_address=dto.drop_off,
            budget=dto.budget,
            note=dto.note,
            status=OrderStatus.PENDING,
            created_at=self._clock(),
            client_name=profile.display_name,
        )
        self._flow.update(lambda orders: (order,) + orders)

        await log_info(
            f"Заказ {order.id} создан клиентом {order.client_name} ({order.city.code})",
            type_msg=TypeMsg.INFO,
        )
        return order

    async def claim(self, order_id: str, executor: UserProfile) -> Optional[Order]:
        """
        Закрепляет заказ за исполнителем.

        Проверка статуса и запись выполняются атомарно, поэтому из нескольких
        конкурирующих вызовов успешен не более чем один.

        Args:
            order_id: ID заказа
            executor: Профиль исполнителя

        Returns:
            Обновлённый заказ или None (не найден или уже не PENDING)
        """
        def take(order: Order) -> Optional[Order]:
            if not OrderStateMachine.can_transition(order.status, OrderStatus.CLAIMED):
                return None
            return order.model_copy(
                update={"status": OrderStatus.CLAIMED, "executor_name": executor.display_name}
            )

        before, claimed = self._apply(order_id, take)

        if claimed is None:
            await log_info(
                f"Заказ {order_id} нельзя закрепить "
                f"(статус: {before.status.value if before else 'не найден'})",
                type_msg=TypeMsg.WARNING,
            )
            return None

        await log_info(f"Заказ {order_id} закреплён за {executor.display_name}", type_msg=TypeMsg.INFO)
        return claimed

    async def advance(self, order_id: str) -> Optional[Order]:
        """
        Переводит заказ на следующий статус основного пути.

        Для конечного статуса ничего не меняет и возвращает заказ как есть.

        Returns:
            Заказ после перехода или None, если заказ не найден
        """
        def step(order: Order) -> Order:
            next_status = OrderStateMachine.next_status(order.status)
            if next_status is None or not OrderStateMachine.can_transition(order.status, next_status):
                return order
            return order.model_copy(update={"status": next_status})

        before, updated = self._apply(order_id, step)
        if updated is None:
            return None

        if before is not None and updated.status != before.status:
            await log_info(
                f"Заказ {order_id}: {before.status.value} -> {updated.status.value}",
                type_msg=TypeMsg.INFO,
            )
        return updated

    async def cancel(self, order_id: str) -> Optional[Order]:
        """
        Отменяет заказ из любого неконечного статуса.

        Повторная отмена безвредна; завершённый заказ остаётся завершённым.

        Returns:
            Заказ после отмены или None, если заказ не найден
        """
        def cancel(order: Order) -> Order:
            if not OrderStateMachine.can_transition(order.status, OrderStatus.CANCELLED):
                return order
            return order.model_copy(update={"status": OrderStatus.CANCELLED})

        before, cancelled = self._apply(order_id, cancel)
        if cancelled is None:
            return None

        if before is not None and cancelled.status != before.status:
            await log_info(f"Заказ {order_id} отменён", type_msg=TypeMsg.INFO)
        return cancelled

    async def seed_demo_orders(self, catalog: CityCatalog) -> tuple[Order, ...]:
        """Добавляет демонстрационные заказы (для стендов и ручной проверки)."""
        now = self._clock()
        cities = catalog.cities
        sample = (
            Order(
                type=OrderType.DELIVERY,
                city=cities[0],
                pickup_address="пр. Абая 15, ЖК Көк Тау",
                drop_off_address="ул. Панфилова 100",
                budget=4500,
                note="Документы до 18:00",
                status=OrderStatus.PENDING,
                created_at=now - timedelta(hours=2),
                client_name="Айгүл",
            ),
            Order(
                type=OrderType.TAXI,
                city=cities[1] if len(cities) > 1 else cities[0],
                pickup_address="Аэропорт Нур-Султан",
                drop_off_address="ул. Қабанбай батыра 21",
                budget=2500,
                note="Водитель с табличкой",
                status=OrderStatus.CLAIMED,
                created_at=now - timedelta(minutes=30),
                client_name="Расул",
                executor_name="Алексей",
            ),
        )
        self._flow.update(lambda orders: orders + sample)
        await log_info(f"Добавлено демо-заказов: {len(sample)}", type_msg=TypeMsg.DEBUG)
        return sample

    # =========================================================================
    # ВНУТРЕННИЕ МЕТОДЫ
    # =========================================================================

    def _apply(self, order_id: str, transform: OrderTransform) -> tuple[Optional[Order], Optional[Order]]:
        """
        Атомарно применяет transform к заказу с данным ID.

        Returns:
            (заказ до изменения, результат transform); (None, None) если заказ не найден
        """
        outcome: list[Optional[Order]] = [None, None]

        def apply(orders: tuple[Order, ...]) -> tuple[Order, ...]:
            for index, order in enumerate(orders):
                if order.id != order_id:
                    continue
                updated = transform(order)
                outcome[0], outcome[1] = order, updated
                if updated is None or updated == order:
                    return orders
                return orders[:index] + (updated,) + orders[index + 1:]
            return orders

        self._flow.update(apply)
        return outcome[0], outcome[1]
