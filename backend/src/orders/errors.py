"""Order operation errors.

Each error carries the HTTP status the API answers with and a stable
error_code for clients. None of them is retried by the order operations.
"""


class OrderError(Exception):
    """Base class for order business-rule failures."""
    status_code = 400
    error_code = "order_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(OrderError):
    """Raised when an order id cannot be parsed."""
    error_code = "invalid_input"


class OrderNotFoundError(OrderError):
    """Raised when the order does not exist."""
    status_code = 404
    error_code = "not_found"


class InvalidOrderStateError(OrderError):
    """Raised when the order is not in a state that allows the operation."""
    error_code = "invalid_state"


class OrderAccessDeniedError(OrderError):
    """Raised when the requester does not own the order."""
    status_code = 403
    error_code = "forbidden"


class MissingFieldError(OrderError):
    """Raised when a field required for checkout is absent."""
    error_code = "missing_field"

    def __init__(self, message: str, field: str):
        super().__init__(message)
        self.field = field


class ProductUnavailableError(OrderError):
    """Raised when an item refers to an unpublished product."""
    error_code = "product_unavailable"

    def __init__(self, message: str, product_id: int):
        super().__init__(message)
        self.product_id = product_id


class InsufficientStockError(OrderError):
    """Raised when a physical product has fewer units than requested."""
    error_code = "insufficient_stock"

    def __init__(self, message: str, product_id: int, available: int, requested: int):
        super().__init__(message)
        self.product_id = product_id
        self.available = available
        self.requested = requested
