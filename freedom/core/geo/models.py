# freedom/core/geo/models.py
"""
Модели справочника городов.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class City(BaseModel):
    """Город из статического справочника."""

    code: str = Field(..., min_length=1, description="Уникальный код города")
    title: str = Field(..., description="Название для отображения")

    class Config:
        frozen = True
