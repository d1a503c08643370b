"""Order and payment status enums and the order status state machine.

State Flow:
    draft → pending → processing → shipped → delivered → completed

Any non-shipped state can be cancelled; delivered/completed orders can be
refunded. Terminal States: cancelled, refunded
"""

from enum import Enum

from .errors import InvalidOrderStateError


class OrderStatus(str, Enum):
    """Order status enumeration (stored lowercase in the order table)."""
    DRAFT = "draft"
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(str, Enum):
    """Payment status enumeration."""
    PENDING = "pending"
    PAID = "paid"
    AUTHORIZED = "authorized"
    FAILED = "failed"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"


ALLOWED_TRANSITIONS = {
    OrderStatus.DRAFT: [OrderStatus.PENDING, OrderStatus.CANCELLED],
    OrderStatus.PENDING: [OrderStatus.PROCESSING, OrderStatus.CANCELLED],
    OrderStatus.PROCESSING: [OrderStatus.SHIPPED, OrderStatus.CANCELLED],
    OrderStatus.SHIPPED: [OrderStatus.DELIVERED],
    OrderStatus.DELIVERED: [OrderStatus.COMPLETED, OrderStatus.REFUNDED],
    OrderStatus.COMPLETED: [OrderStatus.REFUNDED],
    OrderStatus.CANCELLED: [],  # Terminal state
    OrderStatus.REFUNDED: [],  # Terminal state
}


class StateTransitionError(InvalidOrderStateError):
    """Raised when an invalid state transition is attempted."""


def validate_transition(
    current_status: OrderStatus,
    new_status: OrderStatus
) -> None:
    """Validate that a state transition is allowed.

    Raises:
        StateTransitionError: If transition is not allowed
    """
    allowed = ALLOWED_TRANSITIONS.get(current_status, [])
    if new_status not in allowed:
        raise StateTransitionError(
            f"Invalid transition: {current_status.value} -> {new_status.value}. "
            f"Allowed transitions from {current_status.value}: "
            f"{[s.value for s in allowed]}"
        )

