"""SQLAlchemy Models for the Fast Shopping orders API"""

from .base import Base, PortableJSONB
from .product import Product
from .order import Order, OrderItem

__all__ = [
    "Base",
    "PortableJSONB",
    "Product",
    "Order",
    "OrderItem",
]
