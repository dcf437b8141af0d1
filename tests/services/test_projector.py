# tests/services/test_projector.py
"""
Тесты для проектора состояния.
"""

from __future__ import annotations

import pytest

from freedom.common.constants import OrderStatus, OrderType, UserRole
from freedom.core.banners.service import BannerBroadcaster
from freedom.core.orders.models import Order, OrderCreateDTO
from freedom.core.orders.store import OrderStore
from freedom.core.users.models import UserProfile
from freedom.core.users.registry import ProfileRegistry
from freedom.core.verification.queue import VerificationQueue
from freedom.services.session.projector import (
    StateProjector,
    assigned_orders_for,
    available_orders_for,
)
from freedom.services.session.state import AppUiState


def make_order(profile: UserProfile, status: OrderStatus, executor_name: str | None = None) -> Order:
    return Order(
        type=OrderType.TAXI,
        city=profile.selected_city,
        pickup_address="X",
        budget=500,
        status=status,
        client_name=profile.display_name,
        executor_name=executor_name,
    )


@pytest.fixture
def projector(
    order_store: OrderStore,
    verification_queue: VerificationQueue,
    broadcaster: BannerBroadcaster,
    registry: ProfileRegistry,
) -> StateProjector:
    projector = StateProjector(order_store, verification_queue, broadcaster, registry)
    projector.start()
    yield projector
    projector.stop()


class TestOrderViews:
    """Тесты для производных списков исполнителя."""

    def test_available_orders(self, client_profile: UserProfile, executor_profile: UserProfile) -> None:
        """Проверяет: все PENDING плюс свои незавершённые."""
        me = executor_profile.display_name
        pending = make_order(client_profile, OrderStatus.PENDING)
        mine_active = make_order(client_profile, OrderStatus.IN_PROGRESS, me)
        mine_done = make_order(client_profile, OrderStatus.COMPLETED, me)
        foreign = make_order(client_profile, OrderStatus.CLAIMED, "Исполнитель 0000")
        orders = (pending, mine_active, mine_done, foreign)

        assert available_orders_for(orders, executor_profile) == (pending, mine_active)
        assert assigned_orders_for(orders, executor_profile) == (mine_active, mine_done)

    def test_without_executor(self, client_profile: UserProfile) -> None:
        pending = make_order(client_profile, OrderStatus.PENDING)
        claimed = make_order(client_profile, OrderStatus.CLAIMED, "Исполнитель 0000")

        assert available_orders_for((pending, claimed), None) == (pending,)
        assert assigned_orders_for((pending, claimed), None) == ()


class TestStateProjector:
    """Тесты для StateProjector."""

    def test_initial_recompute(self, projector: StateProjector) -> None:
        assert projector.is_running
        assert projector.recomputations == 1
        assert isinstance(projector.state, AppUiState)

    @pytest.mark.asyncio
    async def test_one_recompute_per_emission(
        self, projector: StateProjector, order_store: OrderStore, client_profile: UserProfile
    ) -> None:
        """Проверяет ровно один пересчёт на изменение хранилища."""
        before = projector.recomputations

        order = await order_store.create(client_profile, OrderCreateDTO(type=OrderType.TAXI, pickup="X", budget=1))

        assert projector.recomputations == before + 1
        assert projector.state.client.orders == (order,)

    @pytest.mark.asyncio
    async def test_noop_mutation_does_not_recompute(
        self, projector: StateProjector, order_store: OrderStore
    ) -> None:
        before = projector.recomputations
        await order_store.cancel("missing")
        assert projector.recomputations == before

    @pytest.mark.asyncio
    async def test_snapshots_are_consistent(
        self,
        projector: StateProjector,
        order_store: OrderStore,
        registry: ProfileRegistry,
        client_profile: UserProfile,
    ) -> None:
        """Проверяет, что каждый снимок согласован со всеми хранилищами."""
        seen: list[AppUiState] = []
        projector.flow.subscribe(seen.append, emit_current=False)

        executor = await registry.ensure_profile(UserRole.EXECUTOR)
        order = await order_store.create(client_profile, OrderCreateDTO(type=OrderType.TAXI, pickup="X", budget=1))
        await order_store.claim(order.id, executor)

        last = seen[-1]
        assert last.executor.assigned_orders[0].status == OrderStatus.CLAIMED
        assert last.executor.available_orders == last.executor.assigned_orders
        for snapshot in seen:
            assert snapshot.client.orders == () or snapshot.client.orders[0].id == order.id

    @pytest.mark.asyncio
    async def test_safe_mode_slice(self, projector: StateProjector, broadcaster: BannerBroadcaster) -> None:
        await broadcaster.set_safe_mode(True)

        admin = projector.state.admin
        assert admin.safe_mode_enabled is True
        assert len(admin.banners) == 1

    @pytest.mark.asyncio
    async def test_stop_detaches(self, projector: StateProjector, order_store: OrderStore, client_profile) -> None:
        """Проверяет, что после stop() снимок не меняется."""
        projector.stop()
        await order_store.create(client_profile, OrderCreateDTO(type=OrderType.TAXI, pickup="X", budget=1))

        assert projector.state.client.orders == ()
        assert not projector.is_running

    def test_session_slices_survive_recompute(self, projector: StateProjector) -> None:
        """Проверяет, что пересчёт не затирает срезы сессии."""
        projector.update(lambda state: state.model_copy(update={"phone": "+77001234567"}))
        projector._recompute()

        assert projector.state.phone == "+77001234567"
