"""Order service - read operations for the storefront and the dashboard."""

from typing import List, Optional, Tuple, Union

from sqlalchemy import desc
from sqlalchemy.orm import Session, selectinload

from auth.dependencies import Requester
from models.order import Order
from .errors import InvalidInputError, OrderNotFoundError, OrderAccessDeniedError
from .status import OrderStatus


def parse_order_id(raw_id: Union[str, int]) -> int:
    """Parse an order id taken from the URL path.

    Raises:
        InvalidInputError: If the value is not a positive integer
    """
    if isinstance(raw_id, bool):
        raise InvalidInputError("Invalid order ID")
    try:
        order_id = int(str(raw_id).strip())
    except ValueError:
        raise InvalidInputError("Invalid order ID")
    if order_id <= 0:
        raise InvalidInputError("Invalid order ID")
    return order_id


class OrderService:
    """Service for order read operations."""

    def __init__(self, db: Session):
        self.db = db

    def find_order(self, order_id: int, include_items: bool = True) -> Optional[Order]:
        """Load an order by id, optionally with its items eager-loaded."""
        query = self.db.query(Order).filter(Order.id == order_id)
        if include_items:
            query = query.options(selectinload(Order.items))
        return query.first()

    def get_order(self, raw_order_id: Union[str, int], requester: Requester) -> Order:
        """Get an order visible to the requester.

        Customers may only read their own orders; admins may read any.

        Raises:
            InvalidInputError: If the id is not parseable
            OrderNotFoundError: If the order does not exist
            OrderAccessDeniedError: If the requester does not own the order
        """
        order_id = parse_order_id(raw_order_id)

        order = self.find_order(order_id)
        if not order:
            raise OrderNotFoundError("Order not found")

        if order.customer_id != requester.id and not requester.is_admin:
            raise OrderAccessDeniedError("You do not have permission to view this order")

        return order

    def list_orders(
        self,
        customer_id: Optional[int] = None,
        status: Optional[OrderStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Order], int]:
        """List orders newest first with optional filters.

        Args:
            customer_id: Only orders of this customer (None for all)
            status: Only orders in this status
            limit: Maximum results to return
            offset: Number of results to skip

        Returns:
            Tuple of (list of Orders, total count)
        """
        query = self.db.query(Order)

        if customer_id is not None:
            query = query.filter(Order.customer_id == customer_id)

        if status:
            query = query.filter(Order.status == OrderStatus(status).value)

        total = query.count()

        orders = (
            query.options(selectinload(Order.items))
            .order_by(desc(Order.created_at), desc(Order.id))
            .limit(limit)
            .offset(offset)
            .all()
        )

        return orders, total

    def list_customer_orders(
        self,
        requester: Requester,
        status: Optional[OrderStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Order], int]:
        """Order history of the requester, newest first."""
        return self.list_orders(
            customer_id=requester.id,
            status=status,
            limit=limit,
            offset=offset,
        )
