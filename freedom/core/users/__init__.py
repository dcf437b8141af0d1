# freedom/core/users/__init__.py
"""
Домен пользователей.
Профили ролей, статусы подписки и реестр профилей сессии.
"""

from freedom.core.users.models import SubscriptionStatus, UserProfile
from freedom.core.users.registry import ProfileRegistry

__all__ = [
    "SubscriptionStatus",
    "UserProfile",
    "ProfileRegistry",
]
