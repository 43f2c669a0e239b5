from django.contrib import admin

from orders.infra.models import OrderItemORM, OrderORM
from orders.infra.reconciliation import ReconciliationTask


class OrderItemInline(admin.TabularInline):
    model = OrderItemORM
    extra = 0
    readonly_fields = ("product_id", "product_sku", "product_name", "quantity", "unit_price", "discount_per_item")


@admin.register(OrderORM)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "customer_name", "status", "delivery_type", "total_amount", "created_at")
    list_filter = ("status", "delivery_type", "created_at")
    search_fields = ("order_number", "customer_name", "customer_email")
    # Status and money move only through the order workflow
    readonly_fields = (
        "id",
        "order_number",
        "version",
        "status",
        "delivery_type",
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
        "created_at",
        "updated_at",
    )
    inlines = (OrderItemInline,)


@admin.register(OrderItemORM)
class OrderItemAdmin(admin.ModelAdmin):
    list_display = ("id", "order", "product_name", "quantity", "unit_price", "created_at")
    search_fields = ("product_name", "product_sku")
    readonly_fields = ("id", "order", "product_id", "product_sku", "quantity", "unit_price", "discount_per_item")


@admin.register(ReconciliationTask)
class ReconciliationTaskAdmin(admin.ModelAdmin):
    list_display = ("id", "order_id", "kind", "processed", "retry_count", "created_at")
    list_filter = ("kind", "processed", "created_at")
    readonly_fields = ("id", "order_id", "kind", "payload", "last_error", "processed", "processed_at", "retry_count")
