"""
Request and result objects crossing the service boundary.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from uuid import UUID

from orders.domain.exceptions import ValidationError
from orders.domain.order import Order
from orders.domain.status import DeliveryType


@dataclass(frozen=True)
class OrderItemRequest:
    product_id: UUID
    quantity: int
    special_instructions: str | None = None
    unit_price_override: Decimal | None = None


@dataclass(frozen=True)
class PaymentDetails:
    """Payment method chosen by the customer plus method-specific data."""
    method: str
    amount: Decimal
    currency: str | None = None
    card_last_four: str | None = None
    card_brand: str | None = None
    card_type: str | None = None
    digital_wallet_provider: str | None = None
    bank_name: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class OrderRequest:
    user_id: UUID
    customer_name: str
    customer_email: str
    delivery_type: DeliveryType
    items: list[OrderItemRequest]
    payment: PaymentDetails
    customer_phone: str | None = None
    delivery_address: str | None = None
    delivery_date: datetime | None = None
    special_instructions: str | None = None
    discount_code: str | None = None

    @classmethod
    def from_payload(cls, data: dict) -> "OrderRequest":
        """Build a request from a camelCase API payload."""
        try:
            items = [
                OrderItemRequest(
                    product_id=_uuid(item.get("productId"), "productId"),
                    quantity=int(item.get("quantity")),
                    special_instructions=item.get("specialInstructions"),
                    unit_price_override=_decimal(item.get("unitPriceOverride"), "unitPriceOverride"),
                )
                for item in data.get("items") or []
            ]
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid order item: {e}") from e

        try:
            delivery_type = DeliveryType(data.get("deliveryType") or DeliveryType.PICKUP.value)
        except ValueError as e:
            raise ValidationError(f"Unknown delivery type: {data.get('deliveryType')}") from e

        payment = PaymentDetails(
            method=data.get("paymentMethod") or "",
            amount=_decimal(data.get("paymentAmount"), "paymentAmount"),
            currency=data.get("currencyCode"),
            card_last_four=data.get("cardLastFour"),
            card_brand=data.get("cardBrand"),
            card_type=data.get("cardType"),
            digital_wallet_provider=data.get("digitalWalletProvider"),
            bank_name=data.get("bankName"),
            notes=data.get("paymentNotes"),
        )

        return cls(
            user_id=_uuid(data.get("userId"), "userId"),
            customer_name=data.get("customerName") or "",
            customer_email=data.get("customerEmail") or "",
            customer_phone=data.get("customerPhone"),
            delivery_type=delivery_type,
            delivery_address=data.get("deliveryAddress"),
            delivery_date=_datetime(data.get("deliveryDate"), "deliveryDate"),
            special_instructions=data.get("specialInstructions"),
            discount_code=data.get("discountCode"),
            items=items,
            payment=payment,
        )


@dataclass
class OrderResult:
    """Persisted order plus any non-fatal problems hit on the way."""
    order: Order
    warnings: list[str] = field(default_factory=list)


def _uuid(value, name: str) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name} must be a UUID") from e


def _decimal(value, name: str) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation as e:
        raise ValidationError(f"{name} must be a decimal amount") from e
    if not amount.is_finite():
        raise ValidationError(f"{name} must be a finite amount")
    return amount


def _datetime(value, name: str) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError(f"{name} must be an ISO-8601 datetime") from e
