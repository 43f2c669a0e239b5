from __future__ import annotations

from uuid import uuid4

from django.db import models


STATUS_CHOICES = (
    ("PENDING", "Pending"),
    ("CONFIRMED", "Confirmed"),
    ("PREPARING", "Preparing"),
    ("READY", "Ready"),
    ("OUT_FOR_DELIVERY", "Out for delivery"),
    ("DELIVERED", "Delivered"),
    ("CANCELLED", "Cancelled"),
)

DELIVERY_TYPE_CHOICES = (
    ("PICKUP", "Pickup"),
    ("DELIVERY", "Delivery"),
)


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class OrderORM(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    order_number = models.CharField(max_length=20, unique=True)
    user_id = models.UUIDField(null=True, blank=True)
    customer_name = models.CharField(max_length=200)
    customer_email = models.CharField(max_length=255)
    customer_phone = models.CharField(max_length=20, null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="PENDING")
    delivery_type = models.CharField(max_length=10, choices=DELIVERY_TYPE_CHOICES, default="PICKUP")
    delivery_address = models.TextField(null=True, blank=True)
    delivery_date = models.DateTimeField(null=True, blank=True)
    special_instructions = models.TextField(null=True, blank=True)

    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    tax_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    discount_code = models.CharField(max_length=50, null=True, blank=True)
    discount_percentage = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)

    estimated_preparation_minutes = models.IntegerField(null=True, blank=True)
    estimated_ready_at = models.DateTimeField(null=True, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.TextField(null=True, blank=True)

    # Optimistic concurrency: bumped on every write
    version = models.PositiveIntegerField(default=1)

    class Meta:
        db_table = "orders"
        indexes = [
            models.Index(fields=("user_id",), name="orders_user_id_idx"),
            models.Index(fields=("status",), name="orders_status_idx"),
            models.Index(fields=("created_at",), name="orders_created_at_idx"),
            models.Index(fields=("delivery_date",), name="orders_delivery_date_idx"),
        ]

    def __str__(self):
        return self.order_number


class OrderItemORM(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    order = models.ForeignKey(
        OrderORM,
        on_delete=models.CASCADE,
        related_name="items",
    )
    position = models.PositiveIntegerField(default=0)
    product_id = models.UUIDField()
    product_sku = models.CharField(max_length=50)
    product_name = models.CharField(max_length=200)
    product_category = models.CharField(max_length=100, null=True, blank=True)
    product_description = models.TextField(null=True, blank=True)
    product_image_url = models.CharField(max_length=500, null=True, blank=True)
    quantity = models.IntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    discount_per_item = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    preparation_time_minutes = models.IntegerField(null=True, blank=True)
    special_instructions = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "order_items"
        ordering = ["position"]
        indexes = [
            models.Index(fields=("order",), name="order_items_order_idx"),
            models.Index(fields=("product_id",), name="order_items_product_idx"),
        ]

    def __str__(self):
        return f"{self.product_name} x{self.quantity}"
