"""Order cancellation.

A customer may cancel their own order, and an admin any order, while the
status machine allows a move to CANCELLED (draft, pending, processing).
Orders that were already converted return their reserved units of physical
products to stock; drafts never reserved any.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from sqlalchemy.orm import Session, selectinload

from auth.dependencies import Requester
from models.order import Order, OrderItem
from observability.metrics import order_cancellations_total, inventory_units_restored_total
from .conversion import order_snapshot
from .errors import OrderError, OrderNotFoundError, OrderAccessDeniedError
from .service import OrderService, parse_order_id
from .status import OrderStatus, validate_transition

logger = logging.getLogger(__name__)


def release_stock(items: List[OrderItem]) -> int:
    """Return the units of physical products to stock.

    Returns:
        int: Total units restored
    """
    restored = 0
    for item in items:
        product = item.product
        if product.is_digital:
            continue
        product.quantity += item.quantity
        restored += item.quantity
    return restored


def cancel_order(
    db: Session,
    order_id: Union[str, int],
    requester: Requester,
    reason: Optional[str] = None,
    now: Optional[datetime] = None
) -> Order:
    """Cancel an order and release its reserved stock.

    Args:
        db: Database session
        order_id: Order id as received in the URL
        requester: Authenticated caller; must own the order or be an ADMIN
        reason: Optional free-text reason stored in the metadata
        now: Cancellation timestamp (default: current UTC time)

    Returns:
        Order: The cancelled order, re-read with its items after commit

    Raises:
        InvalidInputError: If order_id is not a valid id
        OrderNotFoundError: If the order does not exist
        OrderAccessDeniedError: If the requester may not cancel the order
        StateTransitionError: If the order's status cannot move to cancelled
    """
    parsed_id = parse_order_id(order_id)

    try:
        order = (
            db.query(Order)
            .options(selectinload(Order.items).selectinload(OrderItem.product))
            .filter(Order.id == parsed_id)
            .first()
        )

        if not order:
            raise OrderNotFoundError("Order not found")

        if order.customer_id != requester.id and not requester.is_admin:
            raise OrderAccessDeniedError("You do not have permission to cancel this order")

        previous_status = OrderStatus(order.status)
        validate_transition(previous_status, OrderStatus.CANCELLED)

        restored_units = 0
        if previous_status != OrderStatus.DRAFT:
            restored_units = release_stock(order.items)

        order.metadata_json = {
            **(order.metadata_json or {}),
            "cancelledAt": (now or datetime.now(timezone.utc)).isoformat(),
            "cancelledBy": requester.id,
            "cancellationReason": reason,
            "statusBeforeCancellation": previous_status.value,
        }
        order.status = OrderStatus.CANCELLED.value

        db.flush()
        db.commit()

    except OrderError as e:
        db.rollback()
        order_cancellations_total.labels(status=e.error_code).inc()
        logger.warning(f"Order {parsed_id} not cancelled: {e.message}")
        raise
    except Exception:
        db.rollback()
        order_cancellations_total.labels(status="error").inc()
        logger.error(f"Error cancelling order {parsed_id}", exc_info=True)
        raise

    order_cancellations_total.labels(status="success").inc()
    inventory_units_restored_total.inc(restored_units)

    cancelled = OrderService(db).find_order(parsed_id)
    if cancelled is None:
        raise OrderNotFoundError("Cancelled order not found")

    logger.info(
        f"Order {parsed_id} cancelled, {restored_units} units restored",
        extra={"order": order_snapshot(cancelled)}
    )
    return cancelled
