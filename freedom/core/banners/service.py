# freedom/core/banners/service.py
"""
Рассылка глобального статуса: баннеры и флаг режима обслуживания.
"""

from __future__ import annotations

from freedom.common.constants import BannerSeverity, TypeMsg
from freedom.common.localization import get_text
from freedom.common.logger import log_info
from freedom.core.banners.models import BroadcastState, NotificationBanner
from freedom.infra.state_flow import StateFlow


class BannerBroadcaster:
    """
    Владелец набора баннеров и флага safe mode.

    Для каждого уровня важности хранится не более одного баннера:
    публикация заменяет баннер того же уровня. Баннеры и флаг живут в одном
    значении, поэтому подписчики не видят флаг без критического баннера
    и наоборот.
    """

    def __init__(self, language: str = "ru") -> None:
        self._flow: StateFlow[BroadcastState] = StateFlow(BroadcastState(), name="broadcast")
        self._language = language

    @property
    def flow(self) -> StateFlow[BroadcastState]:
        """Наблюдаемые баннеры и флаг режима обслуживания."""
        return self._flow

    @property
    def banners(self) -> tuple[NotificationBanner, ...]:
        """Текущие баннеры."""
        return self._flow.value.banners

    @property
    def safe_mode(self) -> bool:
        """Включён ли режим обслуживания."""
        return self._flow.value.safe_mode

    def get(self, severity: BannerSeverity) -> NotificationBanner | None:
        """Возвращает баннер указанного уровня или None."""
        return self._flow.value.get(severity)

    async def publish(self, banner: NotificationBanner) -> NotificationBanner:
        """Публикует баннер, заменяя баннер того же уровня."""
        self._flow.update(lambda state: state.with_banner(banner))
        await log_info(f"Баннер [{banner.severity.value}] опубликован: {banner.title}", type_msg=TypeMsg.INFO)
        return banner

    async def clear(self, severity: BannerSeverity) -> bool:
        """
        Снимает баннер указанного уровня.

        Returns:
            True если баннер был снят
        """
        removed = self._flow.value.get(severity) is not None
        self._flow.update(lambda state: state.without(severity))
        if removed:
            await log_info(f"Баннер [{severity.value}] снят", type_msg=TypeMsg.INFO)
        return removed

    async def set_safe_mode(self, enabled: bool) -> None:
        """
        Включает или выключает режим обслуживания.

        Включение публикует один критический баннер, выключение его снимает.
        Флаг и баннер меняются одним обновлением. Повторный вызов с тем же
        значением ничего не меняет.
        """
        def switch(state: BroadcastState) -> BroadcastState:
            has_banner = state.get(BannerSeverity.CRITICAL) is not None
            if state.safe_mode == enabled and has_banner == enabled:
                return state

            if enabled:
                state = state.with_banner(NotificationBanner(
                    title=get_text("SAFE_MODE_TITLE", self._language),
                    message=get_text("SAFE_MODE_MESSAGE", self._language),
                    severity=BannerSeverity.CRITICAL,
                ))
            else:
                state = state.without(BannerSeverity.CRITICAL)
            return state.model_copy(update={"safe_mode": enabled})

        version = self._flow.version
        self._flow.update(switch)
        if self._flow.version != version:
            await log_info(
                f"Режим обслуживания: {'включён' if enabled else 'выключен'}",
                type_msg=TypeMsg.WARNING,
            )
