# freedom/services/session/__init__.py
"""
Сессия маркетплейса: команды, проекция состояния и снимок для представления.
"""

from freedom.services.session.app import MarketplaceSession
from freedom.services.session.commands import CommandHandler
from freedom.services.session.projector import StateProjector
from freedom.services.session.state import AppUiState, UiEvent

__all__ = [
    "MarketplaceSession",
    "CommandHandler",
    "StateProjector",
    "AppUiState",
    "UiEvent",
]
