"""
Payment orchestration: create a payment for a persisted order and cancel it
when the order is cancelled. Both are non-fatal to the order workflow.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from orders.domain.exceptions import OrderServiceError
from orders.domain.order import Order
from orders.domain.status import OrderStatus
from orders.infra.pii_masker import mask_card_number
from orders.services.dto import PaymentDetails


logger = logging.getLogger(__name__)

CARD_METHODS = {"CARD", "CREDIT_CARD", "DEBIT_CARD"}
WALLET_METHODS = {"DIGITAL_WALLET"}
BANK_METHODS = {"BANK_TRANSFER", "ONLINE_BANKING"}

# Payment service status -> order status driven by the webhook
PAYMENT_STATUS_TRANSITIONS = {
    "COMPLETED": OrderStatus.CONFIRMED,
    "FAILED": OrderStatus.CANCELLED,
    "CANCELLED": OrderStatus.CANCELLED,
}


def order_status_for_payment(payment_status: str | None) -> OrderStatus | None:
    return PAYMENT_STATUS_TRANSITIONS.get((payment_status or "").upper())


@dataclass(frozen=True)
class PaymentOutcome:
    operation: str
    succeeded: bool
    payment_id: str | None = None
    status: str | None = None
    error: str | None = None
    # Request body, kept so a failed call can be replayed
    payload: dict | None = None
    skipped: bool = False


class PaymentOrchestrator:
    """Talks to the payment service on behalf of the order workflows."""

    def __init__(self, payment_client, currency: str = "USD"):
        self.payment_client = payment_client
        self.currency = currency

    def build_payment_request(self, order: Order, details: PaymentDetails) -> dict:
        method = (details.method or "").upper()
        metadata = {}
        if method in CARD_METHODS:
            metadata = {
                "cardLastFour": mask_card_number(details.card_last_four),
                "cardBrand": details.card_brand,
                "cardType": details.card_type,
            }
        elif method in WALLET_METHODS:
            metadata = {"digitalWalletProvider": details.digital_wallet_provider}
        elif method in BANK_METHODS:
            metadata = {"bankName": details.bank_name}

        return {
            "orderId": str(order.id),
            "userId": str(order.user_id) if order.user_id else None,
            "paymentMethod": method,
            "amount": str(order.total_amount),
            "currencyCode": details.currency or self.currency,
            "description": f"Payment for order {order.order_number}",
            "notes": details.notes,
            "metadata": {key: value for key, value in metadata.items() if value is not None},
        }

    def initiate(self, order: Order, details: PaymentDetails) -> PaymentOutcome:
        payload = self.build_payment_request(order, details)
        try:
            response = self.payment_client.create_payment(payload)
        except OrderServiceError as e:
            logger.error(
                "payment_create_failed",
                extra={
                    "order_id": str(order.id),
                    "order_number": order.order_number,
                    "external_call": "create_payment",
                    "error": str(e),
                },
            )
            return PaymentOutcome(
                operation="create_payment", succeeded=False, error=str(e), payload=payload,
            )

        payment_id = response.get("id") or response.get("paymentId")
        logger.info(
            "payment_created",
            extra={
                "order_id": str(order.id),
                "order_number": order.order_number,
                "status": response.get("status"),
            },
        )
        return PaymentOutcome(
            operation="create_payment",
            succeeded=True,
            payment_id=str(payment_id) if payment_id else None,
            status=response.get("status"),
            payload=payload,
        )

    def cancel(self, order: Order, reason: str | None) -> PaymentOutcome:
        payload = {"reason": reason or "Order cancelled"}
        try:
            payment = self.payment_client.get_payment_by_order(order.id)
            if not payment:
                return PaymentOutcome(operation="cancel_payment", succeeded=True, skipped=True, payload=payload)

            payment_id = str(payment.get("id") or payment.get("paymentId"))
            self.payment_client.cancel_payment(payment_id, payload["reason"])
        except OrderServiceError as e:
            logger.error(
                "payment_cancel_failed",
                extra={
                    "order_id": str(order.id),
                    "order_number": order.order_number,
                    "external_call": "cancel_payment",
                    "error": str(e),
                },
            )
            return PaymentOutcome(operation="cancel_payment", succeeded=False, error=str(e), payload=payload)

        logger.info(
            "payment_cancelled",
            extra={"order_id": str(order.id), "order_number": order.order_number},
        )
        return PaymentOutcome(operation="cancel_payment", succeeded=True, payment_id=payment_id, payload=payload)
