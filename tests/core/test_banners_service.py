# tests/core/test_banners_service.py
"""
Тесты для баннеров и режима обслуживания.
"""

from __future__ import annotations

import pytest

from freedom.common.constants import BannerSeverity
from freedom.core.banners.models import NotificationBanner
from freedom.core.banners.service import BannerBroadcaster


class TestBannerBroadcaster:
    """Тесты для BannerBroadcaster."""

    @pytest.mark.asyncio
    async def test_publish_replaces_same_severity(self, broadcaster: BannerBroadcaster) -> None:
        """Проверяет, что на уровень важности приходится один баннер."""
        await broadcaster.publish(NotificationBanner(title="A", message="a", severity=BannerSeverity.INFO))
        second = await broadcaster.publish(NotificationBanner(title="B", message="b", severity=BannerSeverity.INFO))
        await broadcaster.publish(NotificationBanner(title="W", message="w", severity=BannerSeverity.WARNING))

        assert len(broadcaster.banners) == 2
        assert broadcaster.get(BannerSeverity.INFO) == second

    @pytest.mark.asyncio
    async def test_clear(self, broadcaster: BannerBroadcaster) -> None:
        await broadcaster.publish(NotificationBanner(title="W", message="w", severity=BannerSeverity.WARNING))

        assert await broadcaster.clear(BannerSeverity.WARNING) is True
        assert await broadcaster.clear(BannerSeverity.WARNING) is False
        assert broadcaster.banners == ()


class TestSafeMode:
    """Тесты для режима обслуживания."""

    @pytest.mark.asyncio
    async def test_enable_publishes_critical_banner(self, broadcaster: BannerBroadcaster) -> None:
        """Проверяет публикацию критического баннера."""
        await broadcaster.set_safe_mode(True)

        assert broadcaster.safe_mode is True
        critical = [b for b in broadcaster.banners if b.severity == BannerSeverity.CRITICAL]
        assert len(critical) == 1
        assert critical[0].title == "Техработы"

    @pytest.mark.asyncio
    async def test_enable_twice_keeps_single_banner(self, broadcaster: BannerBroadcaster) -> None:
        """Проверяет идемпотентность включения."""
        await broadcaster.set_safe_mode(True)
        banner = broadcaster.get(BannerSeverity.CRITICAL)
        version = broadcaster.flow.version

        await broadcaster.set_safe_mode(True)

        assert broadcaster.get(BannerSeverity.CRITICAL) == banner
        assert broadcaster.flow.version == version

    @pytest.mark.asyncio
    async def test_disable_clears_banner(self, broadcaster: BannerBroadcaster) -> None:
        """Проверяет снятие баннера при выключении."""
        await broadcaster.publish(NotificationBanner(title="I", message="i"))
        await broadcaster.set_safe_mode(True)

        await broadcaster.set_safe_mode(False)

        assert broadcaster.safe_mode is False
        assert broadcaster.get(BannerSeverity.CRITICAL) is None
        assert broadcaster.get(BannerSeverity.INFO) is not None

    @pytest.mark.asyncio
    async def test_disable_when_off(self, broadcaster: BannerBroadcaster) -> None:
        await broadcaster.set_safe_mode(False)
        assert broadcaster.safe_mode is False
        assert broadcaster.banners == ()

    @pytest.mark.asyncio
    async def test_flag_and_banner_change_together(self, broadcaster: BannerBroadcaster) -> None:
        """Проверяет, что флаг и критический баннер публикуются одним значением."""
        seen: list[tuple[bool, bool]] = []
        broadcaster.flow.subscribe(
            lambda state: seen.append((state.safe_mode, state.get(BannerSeverity.CRITICAL) is not None))
        )

        await broadcaster.set_safe_mode(True)
        await broadcaster.set_safe_mode(False)

        assert seen == [(False, False), (True, True), (False, False)]
