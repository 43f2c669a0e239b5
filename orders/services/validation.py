"""
Request validation. Runs before any call to an external service.
"""
from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email

from orders.domain.config import OrderConfig
from orders.domain.exceptions import ValidationError
from orders.domain.order import MODIFIABLE_FIELDS
from orders.domain.status import DeliveryType
from orders.services.dto import OrderRequest


MAX_CUSTOMER_NAME = 200
MAX_CUSTOMER_EMAIL = 255
MAX_CUSTOMER_PHONE = 20
MAX_SPECIAL_INSTRUCTIONS = 1000
MAX_ITEM_INSTRUCTIONS = 500
MAX_DISCOUNT_CODE = 50


def _check_length(value: str | None, limit: int, label: str) -> None:
    if value is not None and len(value) > limit:
        raise ValidationError(f"{label} must not exceed {limit} characters")


def validate_order_request(request: OrderRequest, config: OrderConfig) -> None:
    """Reject malformed or oversized create requests."""
    if not request.customer_name or not request.customer_name.strip():
        raise ValidationError("Customer name is required")
    _check_length(request.customer_name, MAX_CUSTOMER_NAME, "Customer name")

    if not request.customer_email:
        raise ValidationError("Customer email is required")
    _check_length(request.customer_email, MAX_CUSTOMER_EMAIL, "Email")
    try:
        validate_email(request.customer_email)
    except DjangoValidationError as e:
        raise ValidationError("Invalid email format") from e

    _check_length(request.customer_phone, MAX_CUSTOMER_PHONE, "Phone number")
    _check_length(request.special_instructions, MAX_SPECIAL_INSTRUCTIONS, "Special instructions")

    if not request.items:
        raise ValidationError("Order must contain at least one item")
    if len(request.items) > config.max_items_per_order:
        raise ValidationError(
            f"Order cannot contain more than {config.max_items_per_order} items"
        )
    for item in request.items:
        if item.quantity < 1:
            raise ValidationError("Quantity must be at least 1")
        if item.quantity > config.max_quantity_per_item:
            raise ValidationError(
                f"Quantity cannot exceed {config.max_quantity_per_item} per item"
            )
        _check_length(item.special_instructions, MAX_ITEM_INSTRUCTIONS, "Item special instructions")
        if item.unit_price_override is not None and item.unit_price_override < 0:
            raise ValidationError("Unit price cannot be negative")

    if request.delivery_type == DeliveryType.DELIVERY and not (request.delivery_address or "").strip():
        raise ValidationError("Delivery address is required for delivery orders")

    if request.discount_code:
        _check_length(request.discount_code, MAX_DISCOUNT_CODE, "Discount code")
        if config.discount_percentage_for(request.discount_code) is None:
            raise ValidationError(f"Unknown discount code: {request.discount_code}")

    if not request.payment.method:
        raise ValidationError("Payment method is required")
    if request.payment.amount is None or request.payment.amount < Decimal("0.01"):
        raise ValidationError("Payment amount must be greater than zero")


def validate_detail_changes(changes: dict, delivery_type: DeliveryType) -> None:
    """Validate customer edits to a pending order."""
    unknown = set(changes) - MODIFIABLE_FIELDS
    if unknown:
        raise ValidationError(f"Fields cannot be modified: {', '.join(sorted(unknown))}")

    _check_length(changes.get("customer_phone"), MAX_CUSTOMER_PHONE, "Phone number")
    _check_length(changes.get("special_instructions"), MAX_SPECIAL_INSTRUCTIONS, "Special instructions")

    if (
        "delivery_address" in changes
        and delivery_type == DeliveryType.DELIVERY
        and not (changes["delivery_address"] or "").strip()
    ):
        raise ValidationError("Delivery address is required for delivery orders")
