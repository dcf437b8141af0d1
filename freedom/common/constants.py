# freedom/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class UserRole(str, Enum):
    """Роли пользователей."""
    CLIENT = "client"
    EXECUTOR = "executor"
    MODERATOR = "moderator"
    ADMIN = "admin"

    def __str__(self) -> str:
        return self.value


class OrderType(str, Enum):
    """Типы заказов."""
    TAXI = "taxi"
    DELIVERY = "delivery"

    def __str__(self) -> str:
        return self.value


class OrderStatus(str, Enum):
    """Статусы заказа."""
    PENDING = "pending"
    CLAIMED = "claimed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value


class VerificationState(str, Enum):
    """Состояния верификации исполнителя."""
    NOT_SUBMITTED = "not_submitted"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SubscriptionState(str, Enum):
    """Состояния подписки исполнителя."""
    TRIAL = "trial"
    ACTIVE = "active"
    EXPIRED = "expired"


class BannerSeverity(str, Enum):
    """Уровни важности баннеров."""
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class UiEventKind(str, Enum):
    """Категории одноразовых уведомлений для интерфейса."""
    SUCCESS = "success"
    INFO = "info"
    NOT_FOUND = "not_found"
    NOT_ELIGIBLE = "not_eligible"
    CONFLICT = "conflict"
    INVALID_INPUT = "invalid_input"
