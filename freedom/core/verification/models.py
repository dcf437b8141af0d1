# freedom/core/verification/models.py
"""
Модели данных верификации исполнителей.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from freedom.common.constants import VerificationState
from freedom.core.geo.models import City


class VerificationStatus(BaseModel):
    """
    Статус верификации профиля.

    Одно из: не подана, на проверке, одобрена, отклонена (с причиной).
    """

    state: VerificationState = Field(VerificationState.NOT_SUBMITTED, description="Состояние")
    reason: Optional[str] = Field(None, description="Причина отказа")

    class Config:
        frozen = True

    @classmethod
    def not_submitted(cls) -> "VerificationStatus":
        return cls(state=VerificationState.NOT_SUBMITTED)

    @classmethod
    def pending(cls) -> "VerificationStatus":
        return cls(state=VerificationState.PENDING)

    @classmethod
    def approved(cls) -> "VerificationStatus":
        return cls(state=VerificationState.APPROVED)

    @classmethod
    def rejected(cls, reason: str) -> "VerificationStatus":
        return cls(state=VerificationState.REJECTED, reason=reason)

    @property
    def is_approved(self) -> bool:
        """Одобрена ли верификация."""
        return self.state == VerificationState.APPROVED

    @property
    def is_rejected(self) -> bool:
        """Отклонена ли верификация."""
        return self.state == VerificationState.REJECTED


class VerificationRequest(BaseModel):
    """Заявка исполнителя на верификацию."""

    id: str = Field(default_factory=lambda: str(uuid4()), description="UUID заявки")
    executor_name: str = Field(..., description="Отображаемое имя исполнителя")
    phone: str = Field(..., description="Телефон исполнителя")
    submitted_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Время подачи",
    )
    city: City = Field(..., description="Город исполнителя")
    # Идентификаторы вложений не проверяются
    attachments: tuple[str, ...] = Field(default_factory=tuple, description="Вложения")

    class Config:
        frozen = True
