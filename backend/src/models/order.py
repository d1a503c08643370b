"""Order model for the storefront

An order starts life as a DRAFT while the customer builds a cart in checkout,
and becomes a standing, payable order (PENDING) once the draft is converted.
Fulfillment moves it further through the status machine in orders.status.
"""

from decimal import Decimal
from typing import Dict, Any

from sqlalchemy import (
    Column, Integer, Text, DateTime, Numeric, Enum as SQLEnum,
    ForeignKey, Index
)
from sqlalchemy.orm import relationship

from .base import Base, PortableJSONB, utcnow


class Order(Base):
    """Order header: customer, addresses, totals and an open metadata map.

    Lifecycle:
    1. Created by checkout as a draft (status=draft)
    2. Converted by the customer (status=pending, new order_number)
    3. Fulfilled by the supplier/admin dashboard (processing → shipped → ...)
    """

    __tablename__ = 'order'

    id = Column(Integer, primary_key=True, autoincrement=True)

    order_number = Column(Text, nullable=False, unique=True)
    customer_id = Column(Integer, nullable=False, comment="Owner; compared against the requester")

    status = Column(
        SQLEnum(
            'draft',
            'pending',
            'processing',
            'shipped',
            'delivered',
            'completed',
            'cancelled',
            'refunded',
            name='order_status'
        ),
        nullable=False,
        default='draft',
    )
    payment_status = Column(
        SQLEnum(
            'pending',
            'paid',
            'authorized',
            'failed',
            'refunded',
            'cancelled',
            name='payment_status'
        ),
        nullable=True,
    )
    payment_method = Column(Text, nullable=True)
    payment_details = Column(PortableJSONB, nullable=True)
    shipping_method = Column(Text, nullable=True)

    total_amount = Column(Numeric(12, 2), nullable=False, default=Decimal('0.00'))

    # Address data {street, city, postal_code, country, ...}
    shipping_address = Column(PortableJSONB, nullable=True)
    billing_address = Column(PortableJSONB, nullable=True)

    notes = Column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    metadata_json = Column('metadata', PortableJSONB, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index('ix_order_customer_status', 'customer_id', 'status'),
        Index('ix_order_customer_created', 'customer_id', 'created_at'),
    )

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id"
    )

    def to_dict(self, include_items: bool = True) -> Dict[str, Any]:
        """Convert model to dictionary for API responses."""
        data = {
            'id': self.id,
            'order_number': self.order_number,
            'customer_id': self.customer_id,
            'status': self.status,
            'payment_status': self.payment_status,
            'payment_method': self.payment_method,
            'payment_details': self.payment_details,
            'shipping_method': self.shipping_method,
            'total_amount': float(self.total_amount) if self.total_amount is not None else 0.0,
            'shipping_address': self.shipping_address,
            'billing_address': self.billing_address,
            'notes': self.notes,
            'metadata': self.metadata_json or {},
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_items:
            data['items'] = [item.to_dict() for item in self.items]
        return data


class OrderItem(Base):
    """Order line: one product, a quantity and the priced amounts.

    subtotal and tax are captured when the line is added to the draft;
    conversion only reads them to recompute the order total.
    """

    __tablename__ = 'order_item'

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(
        Integer,
        ForeignKey('order.id', ondelete='CASCADE'),
        nullable=False
    )
    product_id = Column(
        Integer,
        ForeignKey('product.id', ondelete='RESTRICT'),
        nullable=False
    )

    sku = Column(Text, nullable=True)
    name = Column(Text, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False, default=Decimal('0.00'))
    subtotal = Column(Numeric(12, 2), nullable=False, default=Decimal('0.00'))
    discount = Column(Numeric(12, 2), nullable=False, default=Decimal('0.00'))
    tax = Column(Numeric(12, 2), nullable=False, default=Decimal('0.00'))
    total = Column(Numeric(12, 2), nullable=False, default=Decimal('0.00'))
    metadata_json = Column('metadata', PortableJSONB, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index('ix_order_item_order', 'order_id'),
        Index('ix_order_item_product', 'product_id'),
    )

    order = relationship("Order", back_populates="items")
    product = relationship("Product")

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary for API responses."""
        return {
            'id': self.id,
            'order_id': self.order_id,
            'product_id': self.product_id,
            'sku': self.sku,
            'name': self.name,
            'quantity': self.quantity,
            'unit_price': float(self.unit_price) if self.unit_price is not None else 0.0,
            'subtotal': float(self.subtotal) if self.subtotal is not None else 0.0,
            'discount': float(self.discount) if self.discount is not None else 0.0,
            'tax': float(self.tax) if self.tax is not None else 0.0,
            'total': float(self.total) if self.total is not None else 0.0,
            'metadata': self.metadata_json,
        }
