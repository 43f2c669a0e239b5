"""
Immutable configuration injected into the order orchestrator.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class OrderConfig:
    tax_rate: Decimal = Decimal("0.08")
    delivery_fee: Decimal = Decimal("5.00")
    max_items_per_order: int = 50
    max_quantity_per_item: int = 100
    max_order_value: Decimal = Decimal("500.00")
    default_preparation_minutes: int = 60
    default_item_preparation_minutes: int = 30
    currency: str = "USD"
    discount_codes: Mapping[str, Decimal] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def from_settings(cls, values: Mapping | None = None) -> "OrderConfig":
        """Build config from the ``BAKERY_ORDERS`` settings dict."""
        if values is None:
            from django.conf import settings
            values = getattr(settings, "BAKERY_ORDERS", {})

        defaults = cls()
        codes = {
            str(code).upper(): Decimal(str(pct))
            for code, pct in values.get("DISCOUNT_CODES", {}).items()
        }
        return cls(
            tax_rate=Decimal(str(values.get("TAX_RATE", defaults.tax_rate))),
            delivery_fee=Decimal(str(values.get("DELIVERY_FEE", defaults.delivery_fee))),
            max_items_per_order=int(values.get("MAX_ITEMS_PER_ORDER", defaults.max_items_per_order)),
            max_quantity_per_item=int(values.get("MAX_QUANTITY_PER_ITEM", defaults.max_quantity_per_item)),
            max_order_value=Decimal(str(values.get("MAX_ORDER_VALUE", defaults.max_order_value))),
            default_preparation_minutes=int(
                values.get("DEFAULT_PREPARATION_MINUTES", defaults.default_preparation_minutes)
            ),
            default_item_preparation_minutes=int(
                values.get("DEFAULT_ITEM_PREPARATION_MINUTES", defaults.default_item_preparation_minutes)
            ),
            currency=values.get("CURRENCY", defaults.currency),
            discount_codes=MappingProxyType(codes),
        )

    def discount_percentage_for(self, code: str | None) -> Decimal | None:
        if not code:
            return None
        return self.discount_codes.get(code.strip().upper())
