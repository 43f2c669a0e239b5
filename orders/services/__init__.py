"""
Application services for the order lifecycle.
"""
from orders.domain.config import OrderConfig
from orders.infra.clients import PaymentServiceClient, ProductServiceClient
from orders.services.dto import OrderResult
from orders.services.orders import OrderService


def get_order_service() -> OrderService:
    """Build an OrderService wired from Django settings."""
    return OrderService(
        config=OrderConfig.from_settings(),
        product_client=ProductServiceClient.from_settings(),
        payment_client=PaymentServiceClient.from_settings(),
    )


__all__ = ["OrderService", "OrderResult", "get_order_service"]
