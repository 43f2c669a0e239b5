"""
HTTP clients for the product/inventory and payment services.

Every call is bounded by a timeout; timeouts, connection errors and 5xx
responses surface as ExternalServiceFailure so callers can classify them
as fatal or non-fatal per call site.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from uuid import UUID

import requests

from orders.domain.exceptions import ExternalServiceFailure, ProductNotFound
from orders.infra.retry import retry_with_backoff


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True)
class ProductSnapshot:
    """Product fields copied onto an order item at order time."""
    product_id: UUID
    sku: str
    name: str
    price: Decimal
    category: str | None = None
    description: str | None = None
    image_url: str | None = None
    preparation_time_minutes: int | None = None


class ServiceClient:
    """Base JSON-over-HTTP client."""

    service_name = "service"
    settings_url_name = ""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    @classmethod
    def from_settings(cls):
        from django.conf import settings
        return cls(
            base_url=getattr(settings, cls.settings_url_name),
            timeout=float(getattr(settings, "EXTERNAL_CALL_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)),
        )

    def _request(self, method: str, path: str, operation: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout as e:
            raise ExternalServiceFailure(self.service_name, operation, "timed out") from e
        except requests.RequestException as e:
            raise ExternalServiceFailure(self.service_name, operation, str(e)) from e

        logger.debug(
            "external_call",
            extra={
                "external_call": f"{self.service_name}.{operation}",
                "status": response.status_code,
            },
        )
        return response

    def _json(self, response: requests.Response, operation: str) -> dict:
        if response.status_code >= 400:
            raise ExternalServiceFailure(
                self.service_name, operation, f"HTTP {response.status_code}"
            )
        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as e:
            raise ExternalServiceFailure(self.service_name, operation, "invalid JSON body") from e
        if not isinstance(body, dict):
            raise ExternalServiceFailure(self.service_name, operation, "unexpected response body")
        return body


class ProductServiceClient(ServiceClient):
    """Client for product catalogue and inventory endpoints."""

    service_name = "product-service"
    settings_url_name = "PRODUCT_SERVICE_URL"

    @retry_with_backoff()
    def get_product(self, product_id: UUID) -> ProductSnapshot:
        response = self._request("GET", f"/api/products/{product_id}", "get_product")
        if response.status_code == 404:
            raise ProductNotFound(product_id)
        return self._to_snapshot(product_id, self._json(response, "get_product"))

    @retry_with_backoff()
    def check_availability(self, product_id: UUID, quantity: int) -> bool:
        response = self._request(
            "GET",
            f"/api/inventory/product/{product_id}/availability",
            "check_availability",
            params={"quantity": quantity},
        )
        if response.status_code == 404:
            raise ProductNotFound(product_id)
        return self._json(response, "check_availability").get("sufficient") is True

    def reserve(self, product_id: UUID, quantity: int) -> bool:
        response = self._request(
            "POST",
            f"/api/inventory/product/{product_id}/reserve",
            "reserve",
            json={"quantity": quantity},
        )
        # Inventory answers 400/409 when the stock cannot be held
        if response.status_code in (400, 409):
            return False
        if response.status_code == 404:
            raise ProductNotFound(product_id)
        return bool(self._json(response, "reserve").get("success"))

    def release(self, product_id: UUID, quantity: int) -> dict:
        response = self._request(
            "POST",
            f"/api/inventory/product/{product_id}/release-reserved",
            "release",
            json={"quantity": quantity},
        )
        return self._json(response, "release")

    def consume(self, product_id: UUID, quantity: int) -> dict:
        response = self._request(
            "POST",
            f"/api/inventory/product/{product_id}/consume",
            "consume",
            json={"quantity": quantity},
        )
        return self._json(response, "consume")

    def _to_snapshot(self, product_id: UUID, data: dict) -> ProductSnapshot:
        category = data.get("category")
        if isinstance(category, dict):
            category = category.get("name")

        raw_price = data.get("effectivePrice")
        if raw_price is None:
            raw_price = data.get("price")
        try:
            price = Decimal(str(raw_price)) if raw_price is not None else Decimal("0.00")
        except InvalidOperation as e:
            raise ExternalServiceFailure(self.service_name, "get_product", f"bad price {raw_price!r}") from e

        prep = data.get("preparationTimeMinutes")
        return ProductSnapshot(
            product_id=product_id,
            sku=data.get("sku") or "",
            name=data.get("name") or "",
            price=price,
            category=str(category) if category is not None else None,
            description=data.get("description"),
            image_url=data.get("primaryImageUrl") or data.get("imageUrl"),
            preparation_time_minutes=int(prep) if isinstance(prep, (int, float)) else None,
        )


class PaymentServiceClient(ServiceClient):
    """Client for the payment service."""

    service_name = "payment-service"
    settings_url_name = "PAYMENT_SERVICE_URL"

    def create_payment(self, payload: dict) -> dict:
        response = self._request("POST", "/api/payments", "create_payment", json=payload)
        return self._json(response, "create_payment")

    @retry_with_backoff()
    def get_payment_by_order(self, order_id: UUID) -> dict | None:
        response = self._request("GET", f"/api/payments/order/{order_id}", "get_payment_by_order")
        if response.status_code == 404:
            return None
        return self._json(response, "get_payment_by_order") or None

    def cancel_payment(self, payment_id: str, reason: str) -> dict:
        response = self._request(
            "POST",
            f"/api/payments/{payment_id}/cancel",
            "cancel_payment",
            json={"reason": reason},
        )
        return self._json(response, "cancel_payment")
