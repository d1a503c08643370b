"""Pydantic schemas for the Orders API

Responses use the storefront's envelope: {"status": "success", "data": {...}}.
"""

from datetime import datetime
from typing import Optional, List, Dict, Any, Literal

from pydantic import BaseModel, Field


# ============================================================================
# Order Schemas
# ============================================================================

class OrderItemResponse(BaseModel):
    """Order line as returned to the storefront"""
    id: int
    order_id: int
    product_id: int
    sku: Optional[str] = None
    name: str
    quantity: int
    unit_price: float
    subtotal: float
    discount: float = 0.0
    tax: float = 0.0
    total: float
    metadata: Optional[Dict[str, Any]] = None


class OrderResponse(BaseModel):
    """Order header with items"""
    id: int
    order_number: str
    customer_id: int
    status: str
    payment_status: Optional[str] = None
    payment_method: Optional[str] = None
    payment_details: Optional[Dict[str, Any]] = None
    shipping_method: Optional[str] = None
    total_amount: float
    shipping_address: Optional[Dict[str, Any]] = None
    billing_address: Optional[Dict[str, Any]] = None
    notes: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemResponse] = Field(default_factory=list)


# ============================================================================
# Request Schemas
# ============================================================================

class CancelOrderRequest(BaseModel):
    """Optional body of POST /orders/{id}/cancel"""
    reason: Optional[str] = Field(None, max_length=500)


# ============================================================================
# Envelopes
# ============================================================================

class OrderData(BaseModel):
    order: OrderResponse


class OrderEnvelope(BaseModel):
    """Response for single-order endpoints (convert, detail)"""
    status: Literal["success"] = "success"
    data: OrderData

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "success",
                "data": {
                    "order": {
                        "id": 17,
                        "order_number": "ORD-482913071",
                        "customer_id": 42,
                        "status": "pending",
                        "payment_status": "pending",
                        "total_amount": 31.0,
                        "metadata": {
                            "isDraft": False,
                            "convertedFromDraft": True,
                            "draftOrderNumber": "DRAFT-1718000000000"
                        },
                        "items": []
                    }
                }
            }
        }
    }


class Pagination(BaseModel):
    total_orders: int
    total_pages: int
    current_page: int
    limit: int
    has_prev_page: bool
    has_next_page: bool


class OrderListData(BaseModel):
    orders: List[OrderResponse]


class OrderListEnvelope(BaseModel):
    """Response for order list endpoints"""
    status: Literal["success"] = "success"
    results: int
    pagination: Pagination
    data: OrderListData


class ErrorResponse(BaseModel):
    """Body of every order business-rule failure"""
    status: Literal["error"] = "error"
    error: str = Field(..., description="Stable error code, e.g. insufficient_stock")
    message: str
