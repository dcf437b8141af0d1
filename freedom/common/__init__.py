# freedom/common/__init__.py
"""
Общие утилиты, константы, логгер и локализация.
"""

from freedom.common.logger import get_logger, log_info, log_error, log_warning, log_debug
from freedom.common.constants import TypeMsg
from freedom.common.localization import get_text, load_lang_dict

__all__ = [
    "get_logger",
    "log_info",
    "log_error",
    "log_warning",
    "log_debug",
    "TypeMsg",
    "get_text",
    "load_lang_dict",
]
