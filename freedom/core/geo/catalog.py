# freedom/core/geo/catalog.py
"""
Статический справочник городов.
Заполняется один раз при старте из конфигурации и далее не меняется.
"""

from __future__ import annotations

from typing import Iterable, Optional

from freedom.core.geo.models import City


class CityCatalog:
    """Неизменяемый список городов с поиском по коду."""

    def __init__(self, cities: Iterable[City]) -> None:
        self._cities: tuple[City, ...] = tuple(cities)
        if not self._cities:
            raise ValueError("Справочник городов не может быть пустым")

        self._by_code = {city.code: city for city in self._cities}
        if len(self._by_code) != len(self._cities):
            raise ValueError("Коды городов должны быть уникальными")

    @classmethod
    def from_settings(cls, settings=None) -> "CityCatalog":
        """Создаёт справочник из секции domain конфигурации."""
        if settings is None:
            from freedom.config import settings

        return cls(City(code=entry.code, title=entry.title) for entry in settings.domain.CITIES)

    @property
    def cities(self) -> tuple[City, ...]:
        """Все города в порядке конфигурации."""
        return self._cities

    @property
    def default(self) -> City:
        """Город по умолчанию — первый в справочнике."""
        return self._cities[0]

    def get(self, code: str) -> Optional[City]:
        """Возвращает город по коду или None."""
        return self._by_code.get(code)

    def resolve(self, code: str) -> City:
        """Возвращает город по коду, для неизвестного кода — город по умолчанию."""
        return self._by_code.get(code, self.default)

    def __len__(self) -> int:
        return len(self._cities)

    def __iter__(self):
        return iter(self._cities)
