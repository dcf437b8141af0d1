# freedom/services/session/state.py
"""
Модели снимка состояния сессии.
Снимок неизменяем и публикуется целиком при каждом изменении.
"""

from __future__ import annotations

from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from freedom.common.constants import UiEventKind, UserRole
from freedom.core.banners.models import NotificationBanner
from freedom.core.geo.models import City
from freedom.core.orders.models import Order
from freedom.core.users.models import SubscriptionStatus, UserProfile
from freedom.core.verification.models import VerificationRequest, VerificationStatus


class UiEvent(BaseModel):
    """Одноразовое уведомление. Хранится одно, новое вытесняет старое."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    kind: UiEventKind = UiEventKind.INFO
    message: str

    class Config:
        frozen = True


class ClientDashboardState(BaseModel):
    """Представление клиента."""

    profile: Optional[UserProfile] = None
    orders: tuple[Order, ...] = ()
    last_created_order_id: Optional[str] = None

    class Config:
        frozen = True


class ExecutorDashboardState(BaseModel):
    """Представление исполнителя."""

    profile: Optional[UserProfile] = None
    verification_status: VerificationStatus = Field(default_factory=VerificationStatus.not_submitted)
    subscription_status: Optional[SubscriptionStatus] = None
    available_orders: tuple[Order, ...] = ()
    assigned_orders: tuple[Order, ...] = ()
    last_submitted_request_id: Optional[str] = None

    class Config:
        frozen = True


class ModeratorDashboardState(BaseModel):
    """Представление модератора."""

    moderator_name: str = ""
    pending_requests: tuple[VerificationRequest, ...] = ()

    class Config:
        frozen = True


class AdminDashboardState(BaseModel):
    """Представление администратора."""

    safe_mode_enabled: bool = False
    banners: tuple[NotificationBanner, ...] = ()

    class Config:
        frozen = True


class AppUiState(BaseModel):
    """Полный согласованный снимок сессии."""

    phone: Optional[str] = None
    selected_city: Optional[City] = None
    available_cities: tuple[City, ...] = ()
    selected_role: Optional[UserRole] = None
    is_onboarding_complete: bool = False

    client: ClientDashboardState = Field(default_factory=ClientDashboardState)
    executor: ExecutorDashboardState = Field(default_factory=ExecutorDashboardState)
    moderator: ModeratorDashboardState = Field(default_factory=ModeratorDashboardState)
    admin: AdminDashboardState = Field(default_factory=AdminDashboardState)

    event: Optional[UiEvent] = None

    class Config:
        frozen = True
