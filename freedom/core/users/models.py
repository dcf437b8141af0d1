# freedom/core/users/models.py
"""
Модели данных профилей и подписок.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from freedom.common.constants import SubscriptionState, UserRole
from freedom.core.geo.models import City
from freedom.core.verification.models import VerificationStatus


class SubscriptionStatus(BaseModel):
    """
    Статус подписки исполнителя.

    Trial хранит длительность окна и момент его начала, Expired — момент
    истечения. Trial с истёкшим окном считается истёкшим (см. is_expired).
    """

    state: SubscriptionState = Field(SubscriptionState.ACTIVE, description="Состояние")
    started_at: Optional[datetime] = Field(None, description="Начало пробного периода")
    remaining: Optional[timedelta] = Field(None, description="Длительность пробного периода")
    expired_at: Optional[datetime] = Field(None, description="Момент истечения")

    class Config:
        frozen = True

    @classmethod
    def trial(cls, remaining: timedelta, started_at: datetime) -> "SubscriptionStatus":
        return cls(state=SubscriptionState.TRIAL, remaining=remaining, started_at=started_at)

    @classmethod
    def active(cls) -> "SubscriptionStatus":
        return cls(state=SubscriptionState.ACTIVE)

    @classmethod
    def expired(cls, expired_at: datetime) -> "SubscriptionStatus":
        return cls(state=SubscriptionState.EXPIRED, expired_at=expired_at)

    @property
    def trial_ends_at(self) -> Optional[datetime]:
        """Момент окончания пробного периода."""
        if self.state != SubscriptionState.TRIAL or self.started_at is None or self.remaining is None:
            return None
        return self.started_at + self.remaining

    def is_expired(self, now: datetime) -> bool:
        """Истекла ли подписка на момент now."""
        if self.state == SubscriptionState.EXPIRED:
            return True
        ends_at = self.trial_ends_at
        return ends_at is not None and now >= ends_at

    def time_left(self, now: datetime) -> Optional[timedelta]:
        """Остаток пробного периода (None для активной и истёкшей подписки)."""
        ends_at = self.trial_ends_at
        if ends_at is None:
            return None
        return max(ends_at - now, timedelta(0))


class UserProfile(BaseModel):
    """Профиль пользователя в рамках сессии (один на роль)."""

    id: str = Field(default_factory=lambda: str(uuid4()), description="UUID профиля")
    phone: str = Field(..., description="Номер телефона")
    role: UserRole = Field(..., description="Роль")
    selected_city: City = Field(..., description="Выбранный город")
    display_name: str = Field(..., description="Отображаемое имя")
    verification: VerificationStatus = Field(
        default_factory=VerificationStatus.not_submitted,
        description="Статус верификации",
    )
    subscription: SubscriptionStatus = Field(
        default_factory=SubscriptionStatus.active,
        description="Статус подписки",
    )

    class Config:
        frozen = True
