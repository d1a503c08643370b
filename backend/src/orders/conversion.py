"""Draft order conversion.

Turns a customer's DRAFT order into a standing PENDING order in a single
transaction: validates ownership, contents and addresses, checks and
decrements product stock, recomputes the total and stamps the metadata.

The transaction runs at the database's default isolation level and takes no
row locks, so two conversions reserving the same product concurrently can
both pass the stock check before either commits.
"""

import logging
import time
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session, selectinload

from auth.dependencies import Requester
from models.order import Order, OrderItem
from observability.metrics import (
    draft_conversions_total,
    draft_conversion_duration_seconds,
    inventory_units_decremented_total,
)
from .errors import (
    OrderError,
    OrderNotFoundError,
    InvalidOrderStateError,
    OrderAccessDeniedError,
    MissingFieldError,
    ProductUnavailableError,
    InsufficientStockError,
)
from .numbering import generate_order_number
from .service import OrderService, parse_order_id
from .status import OrderStatus, PaymentStatus, validate_transition

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
# Largest value of a Numeric(12, 2) column
MAX_AMOUNT = Decimal("9999999999.99")


def _to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


def order_snapshot(order: Order) -> Dict[str, Any]:
    """Fields of an order worth logging around a state change."""
    return {
        "id": order.id,
        "order_number": order.order_number,
        "status": order.status,
        "payment_status": order.payment_status,
        "total_amount": str(order.total_amount) if order.total_amount is not None else None,
    }


def validate_draft(draft: Order, requester: Requester) -> None:
    """Run the conversion checks that do not touch product stock.

    Checks run in order and the first failure wins.

    Raises:
        InvalidOrderStateError: If the order is not a draft or has no items
        OrderAccessDeniedError: If the requester does not own the draft
        MissingFieldError: If the shipping or billing address is missing
    """
    if draft.status != OrderStatus.DRAFT.value:
        raise InvalidOrderStateError("This order is not a draft")

    if draft.customer_id != requester.id:
        raise OrderAccessDeniedError("You do not have permission to convert this draft")

    if not draft.items:
        raise InvalidOrderStateError(
            "Draft order must contain at least one item to be converted"
        )

    if not draft.shipping_address:
        raise MissingFieldError(
            "Shipping address is required to convert draft to order",
            field="shipping_address",
        )

    if not draft.billing_address:
        raise MissingFieldError(
            "Billing address is required to convert draft to order",
            field="billing_address",
        )


def check_item_availability(items: List[OrderItem]) -> None:
    """Check every item's product is purchasable in the requested quantity.

    Lines sharing a product draw on the same stock, in item order.

    Raises:
        ProductUnavailableError: If a product is not published
        InsufficientStockError: If a physical product has too few units
    """
    claimed: Dict[int, int] = {}
    for item in items:
        product = item.product
        already_claimed = claimed.get(product.id, 0)

        if not product.is_published:
            raise ProductUnavailableError(
                f"Product {product.name} is not available for purchase",
                product_id=product.id,
            )

        if not product.has_stock_for(already_claimed + item.quantity):
            raise InsufficientStockError(
                f"Insufficient stock for product {product.name}",
                product_id=product.id,
                available=product.quantity - already_claimed,
                requested=item.quantity,
            )

        claimed[product.id] = already_claimed + item.quantity


def reserve_stock(items: List[OrderItem]) -> int:
    """Decrement stock of physical products, in item order.

    Returns:
        int: Total units decremented
    """
    reserved = 0
    for item in items:
        product = item.product
        if product.is_digital:
            continue
        product.quantity -= item.quantity
        reserved += item.quantity
        logger.debug(
            f"Reserved {item.quantity} of product {product.id}, {product.quantity} left"
        )
    return reserved


def calculate_final_total(draft: Order) -> Decimal:
    """Sum of item subtotals and taxes plus the shipping cost from metadata.

    Raises:
        InvalidOrderStateError: If metadata["shipping"] is not a finite
            number, or the total does not fit the total_amount column
    """
    items_total = sum(
        (_to_decimal(item.subtotal) + _to_decimal(item.tax) for item in draft.items),
        Decimal("0"),
    )

    metadata = draft.metadata_json or {}
    try:
        shipping_cost = _to_decimal(metadata.get("shipping") or 0)
        if not shipping_cost.is_finite():
            raise InvalidOperation
        final_total = (items_total + shipping_cost).quantize(CENTS)
    except InvalidOperation:
        raise InvalidOrderStateError("Draft shipping cost is not a valid amount")

    if abs(final_total) > MAX_AMOUNT:
        raise InvalidOrderStateError("Order total exceeds the maximum amount")

    return final_total


def build_converted_metadata(
    draft: Order,
    final_total: Decimal,
    converted_at: datetime
) -> Dict[str, Any]:
    """Shallow-merge the conversion stamp into the draft's metadata."""
    return {
        **(draft.metadata_json or {}),
        "isDraft": False,
        "convertedFromDraft": True,
        "draftOrderNumber": draft.order_number,
        "convertedAt": converted_at.isoformat(),
        "totalAmount": float(final_total),
        "paymentStatus": draft.payment_status,
        "paymentDetails": draft.payment_details,
        "originalTotalAmount": (
            float(draft.total_amount) if draft.total_amount is not None else None
        ),
    }


def _new_order_number(previous: Optional[str]) -> str:
    order_number = generate_order_number()
    while order_number == previous:
        order_number = generate_order_number()
    return order_number


def convert_draft_to_order(
    db: Session,
    draft_id: Union[str, int],
    requester: Requester,
    now: Optional[datetime] = None
) -> Order:
    """Convert a draft order into a confirmed, payable order.

    Validates the draft, decrements stock for physical products, recomputes
    the total, assigns a new order number and moves the order to PENDING,
    all in one transaction. Any failure after the draft is loaded rolls the
    transaction back and re-raises the original error.

    Args:
        db: Database session
        draft_id: Draft order id as received in the URL
        requester: Authenticated caller; must own the draft
        now: Conversion timestamp (default: current UTC time)

    Returns:
        Order: The converted order, re-read with its items after commit

    Raises:
        InvalidInputError: If draft_id is not a valid id
        OrderNotFoundError: If the draft does not exist
        InvalidOrderStateError: If the order is not a draft or is empty
        OrderAccessDeniedError: If the requester does not own the draft
        MissingFieldError: If an address is missing
        ProductUnavailableError: If an item's product is unpublished
        InsufficientStockError: If a physical product lacks stock
        SQLAlchemyError: Store failures, including order number collisions
    """
    order_id = parse_order_id(draft_id)
    started = time.perf_counter()

    try:
        draft = (
            db.query(Order)
            .options(selectinload(Order.items).selectinload(OrderItem.product))
            .filter(Order.id == order_id)
            .first()
        )

        if not draft:
            raise OrderNotFoundError("Draft order not found")

        logger.info(f"Converting draft order {draft.id}", extra={"draft": order_snapshot(draft)})

        validate_draft(draft, requester)
        validate_transition(OrderStatus(draft.status), OrderStatus.PENDING)
        check_item_availability(draft.items)

        reserved_units = reserve_stock(draft.items)

        final_total = calculate_final_total(draft)
        converted_at = now or datetime.now(timezone.utc)

        draft.metadata_json = build_converted_metadata(draft, final_total, converted_at)
        draft.order_number = _new_order_number(draft.order_number)
        draft.status = OrderStatus.PENDING.value
        draft.payment_status = draft.payment_status or PaymentStatus.PENDING.value
        draft.total_amount = final_total

        logger.info(
            f"Updating draft order {draft.id}, {reserved_units} units reserved",
            extra={"order": order_snapshot(draft)}
        )
        db.flush()
        db.commit()

    except OrderError as e:
        db.rollback()
        draft_conversions_total.labels(status=e.error_code).inc()
        logger.warning(f"Draft order {order_id} not converted: {e.message}")
        raise
    except Exception:
        db.rollback()
        draft_conversions_total.labels(status="error").inc()
        logger.error(f"Error converting draft order {order_id}", exc_info=True)
        raise
    finally:
        draft_conversion_duration_seconds.observe(time.perf_counter() - started)

    draft_conversions_total.labels(status="success").inc()
    inventory_units_decremented_total.inc(reserved_units)

    # Separate read after commit; not atomic with the write above
    converted = OrderService(db).find_order(order_id)
    if converted is None:
        raise OrderNotFoundError("Converted order not found")

    logger.info(
        f"Draft order {order_id} converted to {converted.order_number}",
        extra={"order": order_snapshot(converted)}
    )
    return converted
