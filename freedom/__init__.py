# freedom/__init__.py
"""
Freedom — ядро сессии маркетплейса доставки и такси.
"""
