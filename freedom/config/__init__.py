# freedom/config/__init__.py
"""
Модуль конфигурации.
Экспортирует настройки приложения.
"""

from freedom.config.loader import Settings, get_settings, settings

__all__ = ["Settings", "get_settings", "settings"]
