"""
Infrastructure repositories for domain entities.
"""
from __future__ import annotations

import logging
from uuid import UUID

from django.db import IntegrityError, OperationalError, transaction
from django.db.models import F
from django.utils import timezone

from orders.domain.exceptions import ConcurrentModification, DuplicateOrderNumber
from orders.domain.order import Order, OrderItem
from orders.domain.status import DeliveryType, OrderStatus
from orders.infra.models import OrderItemORM, OrderORM


logger = logging.getLogger(__name__)

_ORDER_FIELDS = (
    "order_number",
    "user_id",
    "customer_name",
    "customer_email",
    "customer_phone",
    "delivery_address",
    "delivery_date",
    "special_instructions",
    "subtotal",
    "tax_amount",
    "discount_amount",
    "delivery_fee",
    "total_amount",
    "discount_code",
    "discount_percentage",
    "estimated_preparation_minutes",
    "estimated_ready_at",
    "confirmed_at",
    "completed_at",
    "cancelled_at",
    "cancellation_reason",
)


class OrderRepository:
    """Repository for Order aggregate."""

    def get_by_id(self, order_id: UUID) -> Order | None:
        """Get order by ID with items."""
        try:
            order_orm = OrderORM.objects.prefetch_related("items").get(id=order_id)
        except OrderORM.DoesNotExist:
            return None
        return self._to_domain(order_orm)

    def get_by_order_number(self, order_number: str) -> Order | None:
        order_orm = (
            OrderORM.objects
            .prefetch_related("items")
            .filter(order_number=order_number)
            .first()
        )
        return self._to_domain(order_orm) if order_orm else None

    def get_by_user(self, user_id: UUID, limit: int = 50, offset: int = 0) -> list[Order]:
        """Get orders by user, newest first."""
        orders_orm = (
            OrderORM.objects
            .filter(user_id=user_id)
            .prefetch_related("items")
            .order_by("-created_at")[offset:offset + limit]
        )
        return [self._to_domain(order_orm) for order_orm in orders_orm]

    def order_number_exists(self, order_number: str) -> bool:
        return OrderORM.objects.filter(order_number=order_number).exists()

    @transaction.atomic
    def save(self, order: Order) -> UUID:
        """
        Save order aggregate.

        New orders (version 0) are inserted; a clash on ``order_number``
        raises DuplicateOrderNumber. Existing orders are updated only if the
        stored version still equals ``order.version`` and no other writer
        holds the row; otherwise ConcurrentModification is raised and nothing
        is written.
        """
        values = {field: getattr(order, field) for field in _ORDER_FIELDS}
        values["status"] = order.status.value
        values["delivery_type"] = order.delivery_type.value

        if order.version == 0:
            try:
                with transaction.atomic():
                    order_orm = OrderORM.objects.create(id=order.id, version=1, **values)
            except IntegrityError:
                if OrderORM.objects.filter(order_number=order.order_number).exists():
                    raise DuplicateOrderNumber(order.order_number)
                raise
        else:
            try:
                updated = (
                    OrderORM.objects
                    .filter(id=order.id, version=order.version)
                    .update(version=F("version") + 1, updated_at=timezone.now(), **values)
                )
            except OperationalError as e:
                # SQLite refuses the write while another transaction holds it
                if "locked" not in str(e):
                    raise
                updated = 0
            if not updated:
                logger.warning(
                    "order_version_conflict",
                    extra={"order_id": str(order.id), "status": order.status.value},
                )
                raise ConcurrentModification(order.id, order.version)
            order_orm = OrderORM.objects.get(id=order.id)
            # Items are owned by the order: replace them wholesale
            OrderItemORM.objects.filter(order=order_orm).delete()

        OrderItemORM.objects.bulk_create([
            OrderItemORM(
                id=item.id,
                order=order_orm,
                position=position,
                product_id=item.product_id,
                product_sku=item.product_sku,
                product_name=item.product_name,
                product_category=item.product_category,
                product_description=item.product_description,
                product_image_url=item.product_image_url,
                quantity=item.quantity,
                unit_price=item.unit_price,
                discount_per_item=item.discount_per_item,
                preparation_time_minutes=item.preparation_time_minutes,
                special_instructions=item.special_instructions,
            )
            for position, item in enumerate(order.items)
        ])

        order.version = order_orm.version
        order.created_at = order_orm.created_at
        order.updated_at = order_orm.updated_at
        return order_orm.id

    def _to_domain(self, order_orm: OrderORM) -> Order:
        """Convert ORM model to domain entity."""
        items = [
            OrderItem(
                id=item_orm.id,
                product_id=item_orm.product_id,
                quantity=item_orm.quantity,
                unit_price=item_orm.unit_price,
                product_sku=item_orm.product_sku,
                product_name=item_orm.product_name,
                product_category=item_orm.product_category,
                product_description=item_orm.product_description,
                product_image_url=item_orm.product_image_url,
                preparation_time_minutes=item_orm.preparation_time_minutes,
                discount_per_item=item_orm.discount_per_item,
                special_instructions=item_orm.special_instructions,
            )
            for item_orm in order_orm.items.all()
        ]

        return Order(
            id=order_orm.id,
            items=items,
            status=OrderStatus(order_orm.status),
            delivery_type=DeliveryType(order_orm.delivery_type),
            created_at=order_orm.created_at,
            updated_at=order_orm.updated_at,
            version=order_orm.version,
            **{field: getattr(order_orm, field) for field in _ORDER_FIELDS},
        )
