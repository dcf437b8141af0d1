# freedom/core/orders/__init__.py
"""
Домен заказов.
Модели, машина состояний и хранилище заказов.
"""

from freedom.core.orders.models import Order, OrderCreateDTO
from freedom.core.orders.state_machine import OrderStateMachine
from freedom.core.orders.store import OrderStore

__all__ = [
    "Order",
    "OrderCreateDTO",
    "OrderStateMachine",
    "OrderStore",
]
