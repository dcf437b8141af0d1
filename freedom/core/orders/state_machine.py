# freedom/core/orders/state_machine.py
"""
Машина состояний заказа.

PENDING -> CLAIMED -> IN_PROGRESS -> COMPLETED, из любого неконечного
статуса возможен переход в CANCELLED. Из конечных статусов переходов нет.
"""

from __future__ import annotations

from typing import Optional

from freedom.common.constants import OrderStatus


class OrderStateMachine:
    FORWARD = {
        OrderStatus.PENDING: OrderStatus.CLAIMED,
        OrderStatus.CLAIMED: OrderStatus.IN_PROGRESS,
        OrderStatus.IN_PROGRESS: OrderStatus.COMPLETED,
    }

    ALLOWED_TRANSITIONS = {
        OrderStatus.PENDING: [OrderStatus.CLAIMED, OrderStatus.CANCELLED],
        OrderStatus.CLAIMED: [OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED],
        OrderStatus.IN_PROGRESS: [OrderStatus.COMPLETED, OrderStatus.CANCELLED],
        OrderStatus.COMPLETED: [],
        OrderStatus.CANCELLED: [],
    }

    @staticmethod
    def next_status(status: OrderStatus) -> Optional[OrderStatus]:
        """Следующий статус по основному пути, None для конечных."""
        return OrderStateMachine.FORWARD.get(status)

    @staticmethod
    def can_transition(current_status: OrderStatus | str, new_status: OrderStatus | str) -> bool:
        """Разрешён ли переход. Любое изменение статуса в OrderStore проходит через эту проверку."""
        try:
            curr = OrderStatus(current_status)
            new = OrderStatus(new_status)
        except ValueError:
            return False
        return new in OrderStateMachine.ALLOWED_TRANSITIONS.get(curr, [])
