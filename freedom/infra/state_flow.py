# freedom/infra/state_flow.py
"""
Наблюдаемое значение с одним писателем и множеством подписчиков.

Реализует:
- Атомарную замену значения целиком (copy-on-write) под блокировкой
- Выдачу текущего значения новым подписчикам сразу при подписке
- Пропуск равных значений (подписчики видят только изменения)
- Асинхронную итерацию для asyncio-потребителей с хранением только последнего значения
"""

from __future__ import annotations

import asyncio
import threading
from typing import AsyncIterator, Callable, Generic, TypeVar

from freedom.common.logger import get_logger

logger = get_logger("state_flow")


T = TypeVar("T")

# Тип синхронного подписчика
Listener = Callable[[T], None]


class StateFlow(Generic[T]):
    """
    Контейнер состояния в стиле StateFlow.

    Все изменения проходят через update(): функция получает текущее значение
    и возвращает новое. Рассылка подписчикам выполняется под той же
    блокировкой, поэтому подписчики одного потока получают значения
    в порядке записи. Подписчик не должен блокироваться надолго.
    """

    def __init__(self, initial: T, name: str = "state") -> None:
        self._value = initial
        self._name = name
        self._lock = threading.RLock()
        self._listeners: dict[int, Listener] = {}
        self._next_token = 0
        self._version = 0
        self._dispatching = False

    def __repr__(self) -> str:
        return f"StateFlow(name={self._name!r}, version={self._version})"

    @property
    def name(self) -> str:
        """Имя потока (для логов)."""
        return self._name

    @property
    def value(self) -> T:
        """Текущее значение."""
        return self._value

    @property
    def version(self) -> int:
        """Количество опубликованных изменений."""
        return self._version

    @property
    def subscribers_count(self) -> int:
        """Количество активных подписчиков."""
        return len(self._listeners)

    # =========================================================================
    # ЗАПИСЬ
    # =========================================================================

    def update(self, transform: Callable[[T], T]) -> T:
        """
        Атомарно заменяет значение результатом transform(текущее).

        Args:
            transform: Чистая функция от текущего значения

        Returns:
            Значение после обновления
        """
        with self._lock:
            current = self._value
            new_value = transform(current)
            if new_value is current or new_value == current:
                return current

            self._value = new_value
            self._version += 1
            self._dispatch()
            return new_value

    def set(self, value: T) -> T:
        """Заменяет значение целиком."""
        return self.update(lambda _: value)

    # =========================================================================
    # ПОДПИСКА
    # =========================================================================

    def subscribe(self, listener: Listener, emit_current: bool = True) -> Callable[[], None]:
        """
        Подписывает слушателя на изменения.

        Args:
            listener: Синхронный обработчик нового значения
            emit_current: Сразу передать текущее значение

        Returns:
            Функция отписки (повторный вызов безопасен)
        """
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._listeners[token] = listener
            if emit_current:
                self._deliver(listener, self._value)

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(token, None)

        return unsubscribe

    async def watch(self) -> AsyncIterator[T]:
        """
        Асинхронно итерирует значения: сначала текущее, затем изменения.

        Медленный потребитель получает только последнее значение,
        промежуточные пропускаются.
        """
        loop = asyncio.get_running_loop()
        changed = asyncio.Event()

        def listener(_: T) -> None:
            loop.call_soon_threadsafe(changed.set)

        unsubscribe = self.subscribe(listener, emit_current=False)
        try:
            last = self._value
            yield last
            while True:
                await changed.wait()
                changed.clear()
                current = self._value
                if current is last or current == last:
                    continue
                last = current
                yield current
        finally:
            unsubscribe()

    # =========================================================================
    # РАССЫЛКА
    # =========================================================================

    def _dispatch(self) -> None:
        """
        Рассылает текущее значение всем подписчикам.

        Вложенный update() из подписчика не начинает новую рассылку:
        внешний цикл повторяет проход, пока не доставит последнюю версию.
        """
        if self._dispatching:
            return

        self._dispatching = True
        try:
            delivered = -1
            while delivered != self._version:
                delivered = self._version
                value = self._value
                for listener in list(self._listeners.values()):
                    self._deliver(listener, value)
        finally:
            self._dispatching = False

    def _deliver(self, listener: Listener, value: T) -> None:
        """Вызывает подписчика, ошибки логируются и не прерывают рассылку."""
        try:
            listener(value)
        except Exception as e:
            logger.error(
                f"Ошибка в подписчике {getattr(listener, '__name__', listener)!r} потока {self._name}: {e}",
                exc_info=True,
            )
