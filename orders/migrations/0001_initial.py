import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="OrderORM",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("order_number", models.CharField(max_length=20, unique=True)),
                ("user_id", models.UUIDField(blank=True, null=True)),
                ("customer_name", models.CharField(max_length=200)),
                ("customer_email", models.CharField(max_length=255)),
                ("customer_phone", models.CharField(blank=True, max_length=20, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("CONFIRMED", "Confirmed"),
                            ("PREPARING", "Preparing"),
                            ("READY", "Ready"),
                            ("OUT_FOR_DELIVERY", "Out for delivery"),
                            ("DELIVERED", "Delivered"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                (
                    "delivery_type",
                    models.CharField(
                        choices=[("PICKUP", "Pickup"), ("DELIVERY", "Delivery")],
                        default="PICKUP",
                        max_length=10,
                    ),
                ),
                ("delivery_address", models.TextField(blank=True, null=True)),
                ("delivery_date", models.DateTimeField(blank=True, null=True)),
                ("special_instructions", models.TextField(blank=True, null=True)),
                ("subtotal", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("tax_amount", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("discount_amount", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("delivery_fee", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("total_amount", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("discount_code", models.CharField(blank=True, max_length=50, null=True)),
                ("discount_percentage", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("estimated_preparation_minutes", models.IntegerField(blank=True, null=True)),
                ("estimated_ready_at", models.DateTimeField(blank=True, null=True)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancellation_reason", models.TextField(blank=True, null=True)),
                ("version", models.PositiveIntegerField(default=1)),
            ],
            options={
                "db_table": "orders",
                "indexes": [
                    models.Index(fields=["user_id"], name="orders_user_id_idx"),
                    models.Index(fields=["status"], name="orders_status_idx"),
                    models.Index(fields=["created_at"], name="orders_created_at_idx"),
                    models.Index(fields=["delivery_date"], name="orders_delivery_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItemORM",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("position", models.PositiveIntegerField(default=0)),
                ("product_id", models.UUIDField()),
                ("product_sku", models.CharField(max_length=50)),
                ("product_name", models.CharField(max_length=200)),
                ("product_category", models.CharField(blank=True, max_length=100, null=True)),
                ("product_description", models.TextField(blank=True, null=True)),
                ("product_image_url", models.CharField(blank=True, max_length=500, null=True)),
                ("quantity", models.IntegerField()),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("discount_per_item", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("preparation_time_minutes", models.IntegerField(blank=True, null=True)),
                ("special_instructions", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders.orderorm",
                    ),
                ),
            ],
            options={
                "db_table": "order_items",
                "ordering": ["position"],
                "indexes": [
                    models.Index(fields=["order"], name="order_items_order_idx"),
                    models.Index(fields=["product_id"], name="order_items_product_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReconciliationTask",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("order_id", models.UUIDField()),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("RELEASE_STOCK", "Release reserved stock"),
                            ("CREATE_PAYMENT", "Create payment"),
                            ("CANCEL_PAYMENT", "Cancel payment"),
                        ],
                        max_length=20,
                    ),
                ),
                ("payload", models.JSONField(default=dict)),
                ("last_error", models.TextField(blank=True, default="")),
                ("processed", models.BooleanField(default=False)),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                ("retry_count", models.IntegerField(default=0)),
            ],
            options={
                "db_table": "order_reconciliation_tasks",
                "indexes": [
                    models.Index(fields=["processed", "created_at"], name="recon_pending_idx"),
                    models.Index(fields=["order_id", "kind"], name="recon_order_kind_idx"),
                ],
            },
        ),
    ]
