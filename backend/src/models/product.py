"""Product SQLAlchemy model"""

from decimal import Decimal

from sqlalchemy import (
    Column, Integer, Text, Boolean, Numeric, DateTime, CheckConstraint, Index
)

from .base import Base, utcnow


class Product(Base):
    """Product sold in the storefront.

    Stock (quantity) is shared across all orders. It is only decremented
    for physical products when a draft order is converted; digital
    products have unlimited stock.
    """
    __tablename__ = "product"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_product_quantity_non_negative"),
        Index("ix_product_sku", "sku", unique=True),
        Index("ix_product_published", "is_published"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    sku = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    quantity = Column(Integer, nullable=False, default=0, comment="Stock level")
    is_published = Column(Boolean, nullable=False, default=False)
    is_digital = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def has_stock_for(self, requested: int) -> bool:
        """Digital products never run out; physical ones need enough units."""
        return self.is_digital or self.quantity >= requested

