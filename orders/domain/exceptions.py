"""
Domain exceptions for the order lifecycle.

Every error carries a stable ``code`` so the API layer can map it to a
response without inspecting messages.
"""
from __future__ import annotations


class OrderServiceError(Exception):
    """Base error for order workflows."""

    code = "ORDER_ERROR"

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        if code:
            self.code = code
        super().__init__(self.message)


class ValidationError(OrderServiceError):
    """Malformed or oversized request, rejected before any external call."""

    code = "VALIDATION_ERROR"


class ProductNotFound(OrderServiceError):
    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class StockUnavailable(OrderServiceError):
    """Availability check or reservation failed."""

    code = "STOCK_UNAVAILABLE"

    def __init__(self, message: str, product_id=None, compensation=None):
        self.product_id = product_id
        # StockOperationResult of the release pass run before raising, if any
        self.compensation = compensation
        super().__init__(message)


class PaymentAmountMismatch(OrderServiceError):
    code = "PAYMENT_AMOUNT_MISMATCH"

    def __init__(self, provided, total):
        self.provided = provided
        self.total = total
        super().__init__(
            f"Payment amount {provided} does not cover order total {total}"
        )


class InvalidTransition(OrderServiceError):
    code = "INVALID_TRANSITION"

    def __init__(self, from_status, to_status):
        self.from_status = getattr(from_status, "value", from_status)
        self.to_status = getattr(to_status, "value", to_status)
        super().__init__(
            f"Invalid status transition from {self.from_status} to {self.to_status}"
        )


class OrderNotFound(OrderServiceError):
    code = "NOT_FOUND"

    def __init__(self, order_ref):
        self.order_ref = order_ref
        super().__init__(f"Order not found: {order_ref}")


class OrderNotModifiable(OrderServiceError):
    code = "INVALID_STATE"

    def __init__(self, order_id, status):
        self.order_id = order_id
        self.status = getattr(status, "value", status)
        super().__init__(f"Order {order_id} cannot be modified in status {self.status}")


class ConcurrentModification(OrderServiceError):
    """Stored order version moved between read and write."""

    code = "CONCURRENT_MODIFICATION"

    def __init__(self, order_id, expected_version: int):
        self.order_id = order_id
        self.expected_version = expected_version
        super().__init__(
            f"Order {order_id} was modified concurrently (expected version {expected_version})"
        )


class ExternalServiceFailure(OrderServiceError):
    """Transport or server error talking to a collaborator."""

    code = "EXTERNAL_SERVICE_FAILURE"

    def __init__(self, service: str, operation: str, detail: str = ""):
        self.service = service
        self.operation = operation
        self.detail = detail
        message = f"{service} {operation} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class DuplicateOrderNumber(OrderServiceError):
    """Another order took the same number between the check and the insert."""

    code = "DUPLICATE_ORDER_NUMBER"

    def __init__(self, order_number: str):
        self.order_number = order_number
        super().__init__(f"Order number already in use: {order_number}")
