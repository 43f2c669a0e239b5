"""
Order -> camelCase dict for the API layer.
"""
from __future__ import annotations

from orders.domain.order import Order, OrderItem
from orders.services.dto import OrderResult


def order_item_to_dict(item: OrderItem) -> dict:
    return {
        "id": item.id,
        "productId": item.product_id,
        "productSku": item.product_sku,
        "productName": item.product_name,
        "productCategory": item.product_category,
        "productDescription": item.product_description,
        "productImageUrl": item.product_image_url,
        "quantity": item.quantity,
        "unitPrice": item.unit_price,
        "discountPerItem": item.discount_per_item,
        "subtotal": item.subtotal,
        "preparationTimeMinutes": item.preparation_time_minutes,
        "specialInstructions": item.special_instructions,
    }


def order_to_dict(order: Order) -> dict:
    return {
        "id": order.id,
        "orderNumber": order.order_number,
        "userId": order.user_id,
        "customerName": order.customer_name,
        "customerEmail": order.customer_email,
        "customerPhone": order.customer_phone,
        "status": order.status.value,
        "deliveryType": order.delivery_type.value,
        "deliveryAddress": order.delivery_address,
        "deliveryDate": order.delivery_date,
        "specialInstructions": order.special_instructions,
        "items": [order_item_to_dict(item) for item in order.items],
        "totalItems": order.total_items,
        "subtotal": order.subtotal,
        "taxAmount": order.tax_amount,
        "discountAmount": order.discount_amount,
        "deliveryFee": order.delivery_fee,
        "totalAmount": order.total_amount,
        "discountCode": order.discount_code,
        "discountPercentage": order.discount_percentage,
        "estimatedPreparationMinutes": order.estimated_preparation_minutes,
        "estimatedReadyAt": order.estimated_ready_at,
        "confirmedAt": order.confirmed_at,
        "completedAt": order.completed_at,
        "cancelledAt": order.cancelled_at,
        "cancellationReason": order.cancellation_reason,
        "canBeCancelled": order.can_be_cancelled,
        "createdAt": order.created_at,
        "updatedAt": order.updated_at,
        "version": order.version,
    }


def order_result_to_dict(result: OrderResult) -> dict:
    return {"order": order_to_dict(result.order), "warnings": list(result.warnings)}
