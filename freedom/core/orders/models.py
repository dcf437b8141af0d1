# freedom/core/orders/models.py
"""
Модели данных заказов.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from freedom.common.constants import OrderStatus, OrderType
from freedom.core.geo.models import City


TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})


class Order(BaseModel):
    """Модель заказа."""

    id: str = Field(default_factory=lambda: str(uuid4()), description="UUID заказа")
    type: OrderType = Field(..., description="Тип заказа")
    city: City = Field(..., description="Город заказа")

    pickup_address: str = Field(..., description="Адрес подачи")
    drop_off_address: Optional[str] = Field(None, description="Адрес назначения")

    budget: int = Field(..., gt=0, description="Бюджет заказа")
    note: str = Field("", description="Комментарий клиента")

    status: OrderStatus = Field(OrderStatus.PENDING, description="Статус заказа")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Время создания",
    )

    client_name: str = Field(..., description="Имя клиента")
    executor_name: Optional[str] = Field(None, description="Имя исполнителя")

    class Config:
        frozen = True

    @property
    def is_terminal(self) -> bool:
        """Находится ли заказ в конечном статусе."""
        return self.status in TERMINAL_STATUSES

    @property
    def is_active(self) -> bool:
        """Активен ли заказ."""
        return not self.is_terminal


class OrderCreateDTO(BaseModel):
    """DTO для создания заказа."""

    type: OrderType
    pickup: str
    drop_off: Optional[str] = None
    budget: int = Field(..., gt=0)
    note: str = ""
