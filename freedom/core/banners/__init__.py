# freedom/core/banners/__init__.py
"""
Глобальные баннеры и режим обслуживания.
"""

from freedom.core.banners.models import BroadcastState, NotificationBanner
from freedom.core.banners.service import BannerBroadcaster

__all__ = ["BroadcastState", "NotificationBanner", "BannerBroadcaster"]
