"""
Domain model for Order aggregate.
"""
from __future__ import annotations

import random
import re
from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import UUID, uuid4

from django.utils import timezone

from orders.domain.exceptions import OrderNotModifiable
from orders.domain.pricing import ZERO, PricingBreakdown, calculate_totals
from orders.domain.status import DeliveryType, OrderStatus
from orders.domain.transitions import (
    CANCELLABLE_STATUSES,
    TERMINAL_STATUSES,
    TransitionEffect,
    validate_transition,
)


ORDER_NUMBER_PATTERN = re.compile(r"^ORD-\d{8}-\d{4}$")

# Fields a customer may still change while the order is PENDING
MODIFIABLE_FIELDS = frozenset({
    "customer_phone",
    "delivery_address",
    "delivery_date",
    "special_instructions",
})


def generate_order_number(today: date | None = None, rng: random.Random | None = None) -> str:
    """Generate order number: ORD-YYYYMMDD-NNNN."""
    today = today or timezone.localdate()
    suffix = (rng or random).randint(1000, 9999)
    return f"ORD-{today:%Y%m%d}-{suffix}"


class OrderItem:
    """Order line with a snapshot of the product taken at order time."""

    def __init__(
        self,
        product_id: UUID,
        quantity: int,
        unit_price: Decimal,
        product_sku: str = "",
        product_name: str = "",
        product_category: str | None = None,
        product_description: str | None = None,
        product_image_url: str | None = None,
        preparation_time_minutes: int | None = None,
        discount_per_item: Decimal = ZERO,
        special_instructions: str | None = None,
        id: UUID | None = None,
    ):
        if quantity <= 0:
            raise ValueError("Quantity must be positive")
        if unit_price < 0:
            raise ValueError("Price must be non-negative")
        if discount_per_item < 0:
            raise ValueError("Discount must be non-negative")

        self.id = id or uuid4()
        self.product_id = product_id
        self.quantity = quantity
        self.unit_price = unit_price
        self.product_sku = product_sku
        self.product_name = product_name
        self.product_category = product_category
        self.product_description = product_description
        self.product_image_url = product_image_url
        self.preparation_time_minutes = preparation_time_minutes
        self.discount_per_item = discount_per_item
        self.special_instructions = special_instructions

    @property
    def effective_unit_price(self) -> Decimal:
        return self.unit_price - self.discount_per_item

    @property
    def subtotal(self) -> Decimal:
        """Calculate item subtotal."""
        return self.effective_unit_price * self.quantity

    @property
    def total_preparation_time(self) -> int:
        return (self.preparation_time_minutes or 0) * self.quantity

    @property
    def has_discount(self) -> bool:
        return self.discount_per_item > 0


class Order:
    """Order aggregate root. Owns its items exclusively."""

    def __init__(
        self,
        id: UUID | None = None,
        order_number: str | None = None,
        user_id: UUID | None = None,
        customer_name: str = "",
        customer_email: str = "",
        customer_phone: str | None = None,
        delivery_type: DeliveryType = DeliveryType.PICKUP,
        delivery_address: str | None = None,
        delivery_date: datetime | None = None,
        special_instructions: str | None = None,
        items: list[OrderItem] | None = None,
        status: OrderStatus = OrderStatus.PENDING,
        subtotal: Decimal = ZERO,
        tax_amount: Decimal = ZERO,
        discount_amount: Decimal = ZERO,
        delivery_fee: Decimal = ZERO,
        total_amount: Decimal = ZERO,
        discount_code: str | None = None,
        discount_percentage: Decimal | None = None,
        estimated_preparation_minutes: int | None = None,
        estimated_ready_at: datetime | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
        confirmed_at: datetime | None = None,
        completed_at: datetime | None = None,
        cancelled_at: datetime | None = None,
        cancellation_reason: str | None = None,
        version: int = 0,
    ):
        self.id = id or uuid4()
        self.order_number = order_number or generate_order_number()
        self.user_id = user_id
        self.customer_name = customer_name
        self.customer_email = customer_email
        self.customer_phone = customer_phone
        self.delivery_type = DeliveryType(delivery_type)
        self.delivery_address = delivery_address
        self.delivery_date = delivery_date
        self.special_instructions = special_instructions
        self._items = list(items or [])
        self._status = OrderStatus(status)
        self.subtotal = subtotal
        self.tax_amount = tax_amount
        self.discount_amount = discount_amount
        self.delivery_fee = delivery_fee
        self.total_amount = total_amount
        self.discount_code = discount_code
        self.discount_percentage = discount_percentage
        self.estimated_preparation_minutes = estimated_preparation_minutes
        self.estimated_ready_at = estimated_ready_at
        self.created_at = created_at
        self.updated_at = updated_at
        self.confirmed_at = confirmed_at
        self.completed_at = completed_at
        self.cancelled_at = cancelled_at
        self.cancellation_reason = cancellation_reason
        # 0 means never persisted
        self.version = version

    @property
    def items(self) -> list[OrderItem]:
        """Get order items (immutable)."""
        return list(self._items)

    @property
    def status(self) -> OrderStatus:
        return self._status

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self._items)

    @property
    def can_be_cancelled(self) -> bool:
        return self._status in CANCELLABLE_STATUSES

    @property
    def can_be_modified(self) -> bool:
        return self._status == OrderStatus.PENDING

    @property
    def is_completed(self) -> bool:
        return self._status == OrderStatus.DELIVERED

    @property
    def is_cancelled(self) -> bool:
        return self._status == OrderStatus.CANCELLED

    @property
    def is_terminal(self) -> bool:
        return self._status in TERMINAL_STATUSES

    def add_item(self, item: OrderItem) -> None:
        if not self.can_be_modified:
            raise ValueError("Can only add items to pending orders")
        self._items.append(item)

    def apply_pricing(self, breakdown: PricingBreakdown) -> None:
        self.subtotal = breakdown.subtotal
        self.discount_amount = breakdown.discount_amount
        self.tax_amount = breakdown.tax_amount
        self.delivery_fee = breakdown.delivery_fee
        self.total_amount = breakdown.total_amount

    def recalculate_totals(self, tax_rate: Decimal, flat_delivery_fee: Decimal) -> PricingBreakdown:
        breakdown = calculate_totals(
            self._items,
            delivery_type=self.delivery_type,
            tax_rate=tax_rate,
            delivery_fee=flat_delivery_fee,
            discount_amount=self.discount_amount or ZERO,
        )
        self.apply_pricing(breakdown)
        return breakdown

    def estimate_preparation(self, default_minutes: int, now: datetime | None = None) -> int:
        """Longest item preparation (minutes x quantity) drives the ready time."""
        per_item = [item.total_preparation_time for item in self._items if item.preparation_time_minutes]
        minutes = max(per_item) if per_item else default_minutes
        self.estimated_preparation_minutes = minutes
        self.estimated_ready_at = (now or timezone.now()) + timedelta(minutes=minutes)
        return minutes

    def transition_to(
        self,
        new_status: OrderStatus,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> TransitionEffect:
        """
        Move to ``new_status`` if the state machine allows it.

        The status is only changed after validation succeeds. Returns the
        effect the caller still owes (stock consumption on confirmation).
        """
        new_status = OrderStatus(new_status)
        effect = validate_transition(self._status, new_status)
        now = now or timezone.now()

        self._status = new_status
        if effect == TransitionEffect.CONFIRM:
            self.confirmed_at = now
        elif effect == TransitionEffect.COMPLETE:
            self.completed_at = now
        elif effect == TransitionEffect.CANCEL:
            self.cancelled_at = now
            self.cancellation_reason = reason
        return effect

    def update_details(self, **changes) -> list[str]:
        """Apply customer-editable field changes; returns the fields changed."""
        if not self.can_be_modified:
            raise OrderNotModifiable(self.id, self._status)

        unknown = set(changes) - MODIFIABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not modifiable: {', '.join(sorted(unknown))}")

        changed = []
        for field, value in changes.items():
            if getattr(self, field) != value:
                setattr(self, field, value)
                changed.append(field)
        return changed
