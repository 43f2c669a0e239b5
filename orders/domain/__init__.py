from orders.domain.order import Order, OrderItem
from orders.domain.status import DeliveryType, OrderStatus

__all__ = ["Order", "OrderItem", "OrderStatus", "DeliveryType"]
