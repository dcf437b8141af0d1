# freedom/core/__init__.py
"""
Доменный слой: заказы, верификация, баннеры, профили, справочник городов.
"""
