# freedom/core/verification/queue.py
"""
Очередь заявок на верификацию исполнителей.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from freedom.common.constants import TypeMsg
from freedom.common.localization import get_text
from freedom.common.logger import log_info
from freedom.core.verification.models import VerificationRequest, VerificationStatus
from freedom.infra.state_flow import StateFlow

if TYPE_CHECKING:
    from freedom.core.users.models import UserProfile


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VerificationQueue:
    """
    Очередь заявок, ожидающих решения модератора.

    Заявка удаляется из очереди ровно один раз — при решении. Итог решения
    в заявке не хранится: его записывают в профиль исполнителя.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None, language: str = "ru") -> None:
        self._flow: StateFlow[tuple[VerificationRequest, ...]] = StateFlow((), name="verification_queue")
        self._clock = clock or utcnow
        self._language = language

    @property
    def flow(self) -> StateFlow[tuple[VerificationRequest, ...]]:
        """Наблюдаемая очередь заявок."""
        return self._flow

    @property
    def pending(self) -> tuple[VerificationRequest, ...]:
        """Заявки в порядке подачи."""
        return self._flow.value

    def get(self, request_id: str) -> Optional[VerificationRequest]:
        """Возвращает заявку по ID или None."""
        return next((request for request in self._flow.value if request.id == request_id), None)

    async def submit(self, executor: UserProfile, attachments: Iterable[str]) -> VerificationRequest:
        """
        Ставит заявку исполнителя в конец очереди.

        Args:
            executor: Профиль исполнителя
            attachments: Идентификаторы вложений (может быть пусто)

        Returns:
            Созданная заявка
        """
        request = VerificationRequest(
            executor_name=executor.display_name,
            phone=executor.phone,
            submitted_at=self._clock(),
            city=executor.selected_city,
            attachments=tuple(attachments),
        )
        self._flow.update(lambda queue: queue + (request,))

        await log_info(
            f"Заявка на верификацию {request.id} от {request.executor_name} "
            f"(вложений: {len(request.attachments)})",
            type_msg=TypeMsg.INFO,
        )
        return request

    async def review(self, request_id: str, approved: bool, moderator_name: str) -> VerificationStatus:
        """
        Выносит решение по заявке и удаляет её из очереди.

        Для неизвестного ID очередь не меняется и возвращается отказ
        с причиной «Не найдено».

        Args:
            request_id: ID заявки
            approved: Одобрить или отклонить
            moderator_name: Имя модератора (попадает в причину отказа)

        Returns:
            Approved или Rejected
        """
        found: list[VerificationRequest] = []

        def remove(queue: tuple[VerificationRequest, ...]) -> tuple[VerificationRequest, ...]:
            remaining = tuple(request for request in queue if request.id != request_id)
            if len(remaining) != len(queue):
                found.append(next(request for request in queue if request.id == request_id))
            return remaining

        self._flow.update(remove)

        if not found:
            await log_info(f"Заявка {request_id} не найдена в очереди", type_msg=TypeMsg.WARNING)
            return VerificationStatus.rejected(get_text("REVIEW_NOT_FOUND", self._language))

        if approved:
            decision = VerificationStatus.approved()
        else:
            decision = VerificationStatus.rejected(
                get_text("REVIEW_REJECTED_BY", self._language, moderator=moderator_name)
            )

        await log_info(
            f"Заявка {request_id} ({found[0].executor_name}): {decision.state.value}, модератор {moderator_name}",
            type_msg=TypeMsg.INFO,
        )
        return decision
