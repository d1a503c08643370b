"""Prometheus metrics for the orders API.

Defines and exposes operational metrics for monitoring and alerting.
"""

from prometheus_client import Counter, Histogram

# Draft conversion metrics
draft_conversions_total = Counter(
    "fastshop_draft_conversions_total",
    "Total draft-to-order conversion attempts",
    ["status"]  # status: success | <error_code> | error
)

draft_conversion_duration_seconds = Histogram(
    "fastshop_draft_conversion_duration_seconds",
    "Time spent converting a draft order in seconds",
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
)

# Inventory metrics
inventory_units_decremented_total = Counter(
    "fastshop_inventory_units_decremented_total",
    "Total physical product units reserved by converted orders"
)

inventory_units_restored_total = Counter(
    "fastshop_inventory_units_restored_total",
    "Total physical product units returned to stock by cancelled orders"
)

# Cancellation metrics
order_cancellations_total = Counter(
    "fastshop_order_cancellations_total",
    "Total order cancellation attempts",
    ["status"]  # status: success | <error_code> | error
)
