"""Orders API Router - draft conversion, cancellation, detail and list endpoints."""

import math
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from auth.dependencies import Requester, get_current_requester, require_role
from auth.roles import UserRole
from models.order import Order
from .cancellation import cancel_order
from .conversion import convert_draft_to_order
from .schemas import (
    CancelOrderRequest,
    OrderEnvelope,
    OrderData,
    OrderResponse,
    OrderListEnvelope,
    OrderListData,
    Pagination,
    ErrorResponse,
)
from .service import OrderService
from .status import OrderStatus


router = APIRouter(prefix="/orders", tags=["orders"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input or order state"},
    403: {"model": ErrorResponse, "description": "Requester does not own the order"},
    404: {"model": ErrorResponse, "description": "Order not found"},
}


def _order_envelope(order: Order) -> OrderEnvelope:
    return OrderEnvelope(data=OrderData(order=OrderResponse.model_validate(order.to_dict())))


def _list_envelope(orders: List[Order], total: int, page: int, per_page: int) -> OrderListEnvelope:
    total_pages = math.ceil(total / per_page) if total else 0
    return OrderListEnvelope(
        results=len(orders),
        pagination=Pagination(
            total_orders=total,
            total_pages=total_pages,
            current_page=page,
            limit=per_page,
            has_prev_page=page > 1,
            has_next_page=page < total_pages,
        ),
        data=OrderListData(
            orders=[OrderResponse.model_validate(order.to_dict()) for order in orders]
        ),
    )


@router.get(
    "",
    response_model=OrderListEnvelope,
    summary="List all orders",
    description="""
    List orders of all customers for the supplier/admin dashboard.

    **Permissions:** Requires SUPPLIER role or higher
    """
)
def list_orders(
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    customer_id: Optional[int] = Query(None, description="Filter by customer"),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    per_page: int = Query(20, ge=1, le=100, description="Results per page"),
    requester: Requester = Depends(require_role(UserRole.SUPPLIER)),
    db: Session = Depends(get_db)
) -> OrderListEnvelope:
    orders, total = OrderService(db).list_orders(
        customer_id=customer_id,
        status=status,
        limit=per_page,
        offset=(page - 1) * per_page,
    )
    return _list_envelope(orders, total, page, per_page)


@router.get(
    "/my-orders",
    response_model=OrderListEnvelope,
    summary="List the requester's orders",
)
def list_my_orders(
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    per_page: int = Query(20, ge=1, le=100, description="Results per page"),
    requester: Requester = Depends(get_current_requester),
    db: Session = Depends(get_db)
) -> OrderListEnvelope:
    """Order history of the authenticated customer, newest first."""
    orders, total = OrderService(db).list_customer_orders(
        requester,
        status=status,
        limit=per_page,
        offset=(page - 1) * per_page,
    )
    return _list_envelope(orders, total, page, per_page)


@router.get(
    "/{order_id}",
    response_model=OrderEnvelope,
    responses=ERROR_RESPONSES,
    summary="Get an order",
)
def get_order(
    order_id: str,
    requester: Requester = Depends(get_current_requester),
    db: Session = Depends(get_db)
) -> OrderEnvelope:
    """Get an order with its items (owner or ADMIN only)."""
    order = OrderService(db).get_order(order_id, requester)
    return _order_envelope(order)


@router.post(
    "/{order_id}/convert",
    response_model=OrderEnvelope,
    status_code=200,
    responses=ERROR_RESPONSES,
    summary="Convert a draft order into an order",
    description="""
    Convert the requester's DRAFT order into a PENDING, payable order.

    **Requirements:**
    - Order must be in draft status and owned by the requester
    - Draft must contain at least one item
    - Shipping and billing addresses must be set
    - Every product must be published; physical products must have stock

    **Side effects:** Decrements stock of physical products, recomputes the
    total (items + tax + shipping), assigns a new order number.

    **State Transition:** draft → pending
    """
)
def convert(
    order_id: str,
    requester: Requester = Depends(get_current_requester),
    db: Session = Depends(get_db)
) -> OrderEnvelope:
    order = convert_draft_to_order(db, order_id, requester)
    return _order_envelope(order)


@router.post(
    "/{order_id}/cancel",
    response_model=OrderEnvelope,
    status_code=200,
    responses=ERROR_RESPONSES,
    summary="Cancel an order",
    description="""
    Cancel an order that has not shipped yet.

    **Permissions:** Owner of the order, or ADMIN

    **Side effects:** Converted orders (pending, processing) return their
    physical product units to stock. The reason is kept in the metadata.

    **State Transition:** draft | pending | processing → cancelled
    """
)
def cancel(
    order_id: str,
    payload: Optional[CancelOrderRequest] = None,
    requester: Requester = Depends(get_current_requester),
    db: Session = Depends(get_db)
) -> OrderEnvelope:
    reason = payload.reason if payload else None
    order = cancel_order(db, order_id, requester, reason=reason)
    return _order_envelope(order)
