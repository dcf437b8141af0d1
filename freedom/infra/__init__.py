# freedom/infra/__init__.py
"""
Инфраструктурный слой.
Примитивы хранения и рассылки состояния.
"""

from freedom.infra.state_flow import StateFlow

__all__ = ["StateFlow"]
