"""Observability module for the orders API.

Provides structured logging, request correlation, metrics, and health checks.
"""

from .logging_config import configure_logging, get_logger
from .metrics import (
    draft_conversions_total,
    draft_conversion_duration_seconds,
    inventory_units_decremented_total,
    inventory_units_restored_total,
    order_cancellations_total,
)
from .request_id import request_id_var, get_request_id, set_request_id, generate_request_id
from .health import HealthStatus, ComponentHealth
from .middleware import RequestIDMiddleware

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Metrics
    "draft_conversions_total",
    "draft_conversion_duration_seconds",
    "inventory_units_decremented_total",
    "inventory_units_restored_total",
    "order_cancellations_total",
    # Request ID
    "request_id_var",
    "get_request_id",
    "set_request_id",
    "generate_request_id",
    # Health
    "HealthStatus",
    "ComponentHealth",
    # Middleware
    "RequestIDMiddleware",
]
