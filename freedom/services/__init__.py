# freedom/services/__init__.py
"""
Сервисный слой.
"""
