"""
Pricing engine: subtotal, discount, tax, delivery fee and total.

Pure functions over Decimal. Every derived amount is rounded half-up to
two places on its own so repeated recomputation cannot drift.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Protocol

from orders.domain.status import DeliveryType


ZERO = Decimal("0.00")
TWO_PLACES = Decimal("0.01")


class PricedLine(Protocol):
    unit_price: Decimal
    discount_per_item: Decimal
    quantity: int


@dataclass(frozen=True)
class PricingBreakdown:
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    delivery_fee: Decimal
    total_amount: Decimal


def round2(value: Decimal) -> Decimal:
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _check_amount(name: str, value: Decimal) -> None:
    if not Decimal(value).is_finite() or value < 0:
        raise ValueError(f"{name} must be a finite non-negative amount, got {value}")


def calculate_subtotal(items: Iterable[PricedLine]) -> Decimal:
    """Sum of unit price x quantity less per-item discounts."""
    gross = ZERO
    discounts = ZERO
    for item in items:
        _check_amount("unit_price", item.unit_price)
        _check_amount("discount_per_item", item.discount_per_item)
        if item.quantity <= 0:
            raise ValueError(f"quantity must be positive, got {item.quantity}")
        gross += item.unit_price * item.quantity
        discounts += item.discount_per_item * item.quantity
    return round2(max(gross - discounts, ZERO))


def discount_for_percentage(subtotal: Decimal, percentage: Decimal | None) -> Decimal:
    if not percentage:
        return ZERO
    _check_amount("percentage", percentage)
    return round2(min(subtotal * percentage / Decimal("100"), subtotal))


def delivery_fee_for(delivery_type: DeliveryType, flat_fee: Decimal) -> Decimal:
    _check_amount("delivery_fee", flat_fee)
    if DeliveryType(delivery_type) == DeliveryType.DELIVERY:
        return round2(flat_fee)
    return ZERO


def calculate_totals(
    items: Iterable[PricedLine],
    delivery_type: DeliveryType,
    tax_rate: Decimal,
    delivery_fee: Decimal,
    discount_amount: Decimal = ZERO,
) -> PricingBreakdown:
    """
    Price an order.

    total = (subtotal - discount) + tax + delivery fee, where tax is charged
    on the discounted subtotal only. The discount is capped at the subtotal
    so the total never goes negative.
    """
    _check_amount("tax_rate", tax_rate)
    _check_amount("discount_amount", discount_amount)

    subtotal = calculate_subtotal(items)
    discount = round2(min(discount_amount, subtotal))
    discounted = round2(subtotal - discount)
    tax = round2(discounted * tax_rate)
    fee = delivery_fee_for(delivery_type, delivery_fee)
    total = round2(discounted + tax + fee)

    return PricingBreakdown(
        subtotal=subtotal,
        discount_amount=discount,
        tax_amount=tax,
        delivery_fee=fee,
        total_amount=total,
    )
