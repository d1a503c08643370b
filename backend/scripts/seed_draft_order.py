#!/usr/bin/env python
"""Seed script to create a demo product and a checkout draft for a customer.

Creates (or reuses) a published physical product, then a DRAFT order with
one line and both addresses set, and prints a customer access token so the
draft can be converted via POST /api/v1/orders/{id}/convert.

Usage:
    python backend/scripts/seed_draft_order.py

Environment Variables:
    DATABASE_URL: PostgreSQL connection string
    JWT_SECRET: Token signing key (required, must match the API)
    CUSTOMER_ID: Owner of the draft (default: 1)
    PRODUCT_SKU: SKU of the demo product (default: DEMO-TSHIRT)
    PRODUCT_STOCK: Initial stock of a newly created product (default: 10)
    ITEM_QUANTITY: Quantity ordered on the draft (default: 2)
"""

import os
import sys
import time
from decimal import Decimal
from pathlib import Path

# Add backend/src to Python path
backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from sqlalchemy.exc import SQLAlchemyError

from auth.jwt import create_access_token
from auth.roles import UserRole
from database import SessionLocal
from models.order import Order, OrderItem
from models.product import Product
from orders.status import OrderStatus


def main():
    """Create the demo product and draft order."""
    if not os.getenv("JWT_SECRET"):
        print("ERROR: JWT_SECRET environment variable is required")
        sys.exit(1)

    try:
        customer_id = int(os.getenv("CUSTOMER_ID", "1"))
        product_stock = int(os.getenv("PRODUCT_STOCK", "10"))
        item_quantity = int(os.getenv("ITEM_QUANTITY", "2"))
    except ValueError as e:
        print(f"ERROR: Invalid numeric setting: {e}")
        sys.exit(1)

    product_sku = os.getenv("PRODUCT_SKU", "DEMO-TSHIRT")

    session = SessionLocal()

    try:
        product = session.query(Product).filter(Product.sku == product_sku).first()
        if not product:
            product = Product(
                sku=product_sku,
                name="Fast Shopping T-Shirt",
                price=Decimal("12.50"),
                quantity=product_stock,
                is_published=True,
                is_digital=False,
            )
            session.add(product)
            session.flush()

        subtotal = product.price * item_quantity
        tax = (subtotal * Decimal("0.08")).quantize(Decimal("0.01"))
        address = {
            "street": "1 Market Street",
            "city": "Springfield",
            "postal_code": "12345",
            "country": "US",
        }

        draft = Order(
            order_number=f"DRAFT-{int(time.time() * 1000)}",
            customer_id=customer_id,
            status=OrderStatus.DRAFT.value,
            total_amount=subtotal + tax,
            shipping_address=address,
            billing_address=address,
            shipping_method="standard",
            metadata_json={"isDraft": True, "shipping": 5.0},
            items=[
                OrderItem(
                    product_id=product.id,
                    sku=product.sku,
                    name=product.name,
                    quantity=item_quantity,
                    unit_price=product.price,
                    subtotal=subtotal,
                    tax=tax,
                    total=subtotal + tax,
                )
            ],
        )
        session.add(draft)
        session.commit()

        token = create_access_token(user_id=customer_id, role=UserRole.CUSTOMER.value)

        print("SUCCESS: Draft order created")
        print(f"  Draft ID:     {draft.id}")
        print(f"  Order number: {draft.order_number}")
        print(f"  Product:      {product.sku} (stock {product.quantity})")
        print(f"  Customer:     {customer_id}")
        print(f"  Token:        {token}")

    except SQLAlchemyError as e:
        session.rollback()
        print(f"ERROR: Failed to create draft order: {e}")
        sys.exit(1)

    finally:
        session.close()


if __name__ == "__main__":
    main()
