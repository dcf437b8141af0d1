# freedom/core/banners/models.py
"""
Модели глобальных баннеров.
"""

from __future__ import annotations

from uuid import uuid4

from pydantic import BaseModel, Field

from freedom.common.constants import BannerSeverity


class NotificationBanner(BaseModel):
    """Баннер, видимый всем ролям."""

    id: str = Field(default_factory=lambda: str(uuid4()), description="UUID баннера")
    title: str = Field(..., description="Заголовок")
    message: str = Field(..., description="Текст")
    severity: BannerSeverity = Field(BannerSeverity.INFO, description="Важность")

    class Config:
        frozen = True


class BroadcastState(BaseModel):
    """Баннеры и флаг режима обслуживания, публикуемые одним значением."""

    banners: tuple[NotificationBanner, ...] = ()
    safe_mode: bool = False

    class Config:
        frozen = True

    def get(self, severity: BannerSeverity) -> NotificationBanner | None:
        """Баннер указанного уровня или None."""
        return next((banner for banner in self.banners if banner.severity == severity), None)

    def with_banner(self, banner: NotificationBanner) -> "BroadcastState":
        """Копия с баннером, заменившим баннер того же уровня."""
        banners = tuple(b for b in self.banners if b.severity != banner.severity) + (banner,)
        return self.model_copy(update={"banners": banners})

    def without(self, severity: BannerSeverity) -> "BroadcastState":
        """Копия без баннера указанного уровня."""
        banners = tuple(b for b in self.banners if b.severity != severity)
        if len(banners) == len(self.banners):
            return self
        return self.model_copy(update={"banners": banners})
