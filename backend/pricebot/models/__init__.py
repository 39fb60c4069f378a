"""
Database models for Price Bot.

All SQLAlchemy models are imported here so metadata knows every table.
"""

from pricebot.models.shop import Shop
from pricebot.models.good import Good
from pricebot.models.price import GoodsPrice
from pricebot.models.receipt import Receipt

__all__ = [
    "Shop",
    "Good",
    "GoodsPrice",
    "Receipt",
]
