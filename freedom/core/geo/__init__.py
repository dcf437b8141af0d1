# freedom/core/geo/__init__.py
"""
Справочник городов.
"""

from freedom.core.geo.models import City
from freedom.core.geo.catalog import CityCatalog

__all__ = ["City", "CityCatalog"]
