"""
Worker that retries parked stock and payment calls.
"""
from __future__ import annotations

import logging
from uuid import UUID

from orders.infra.clients import PaymentServiceClient, ProductServiceClient
from orders.infra.reconciliation import (
    CANCEL_PAYMENT,
    CREATE_PAYMENT,
    RELEASE_STOCK,
    ReconciliationRepository,
    ReconciliationTask,
)
from orders.infra.repositories import OrderRepository


logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 5


class Reconciler:
    """Replays reconciliation tasks against the external services."""

    def __init__(
        self,
        product_client: ProductServiceClient | None = None,
        payment_client: PaymentServiceClient | None = None,
        reconciliation_repo: ReconciliationRepository | None = None,
        order_repo: OrderRepository | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ):
        self.product_client = product_client or ProductServiceClient.from_settings()
        self.payment_client = payment_client or PaymentServiceClient.from_settings()
        self.reconciliation_repo = reconciliation_repo or ReconciliationRepository()
        self.order_repo = order_repo or OrderRepository()
        self.max_retries = max_retries
        self._handlers = {
            RELEASE_STOCK: self._release_stock,
            CREATE_PAYMENT: self._create_payment,
            CANCEL_PAYMENT: self._cancel_payment,
        }

    def process_pending(self, limit: int = 100) -> int:
        """Process pending tasks; returns how many completed."""
        tasks = self.reconciliation_repo.get_pending(limit=limit, max_retries=self.max_retries)
        processed_count = 0

        for task in tasks:
            try:
                self._process_task(task)
            except Exception as e:
                self.reconciliation_repo.increment_retry(task.id, str(e))
                logger.error(
                    "reconciliation_task_failed",
                    extra={
                        "order_id": str(task.order_id),
                        "operation": task.kind,
                        "error": str(e),
                    },
                    exc_info=True,
                )
                continue

            self.reconciliation_repo.mark_processed(task.id)
            processed_count += 1
            logger.info(
                "reconciliation_task_processed",
                extra={"order_id": str(task.order_id), "operation": task.kind},
            )

        return processed_count

    def _process_task(self, task: ReconciliationTask) -> None:
        handler = self._handlers.get(task.kind)
        if handler is None:
            raise ValueError(f"Unknown reconciliation task kind: {task.kind}")
        handler(task.order_id, task.payload or {})

    def _release_stock(self, order_id: UUID, payload: dict) -> None:
        self.product_client.release(UUID(str(payload["productId"])), int(payload["quantity"]))

    def _create_payment(self, order_id: UUID, payload: dict) -> None:
        order = self.order_repo.get_by_id(order_id)
        if order is None or order.is_cancelled:
            logger.info(
                "reconciliation_payment_skipped",
                extra={
                    "order_id": str(order_id),
                    "operation": CREATE_PAYMENT,
                    "status": order.status.value if order else "MISSING",
                },
            )
            return
        # The original call may have reached the payment service before failing
        if self.payment_client.get_payment_by_order(order_id):
            return
        self.payment_client.create_payment(payload)

    def _cancel_payment(self, order_id: UUID, payload: dict) -> None:
        payment = self.payment_client.get_payment_by_order(order_id)
        if not payment:
            return
        payment_id = str(payment.get("id") or payment.get("paymentId"))
        self.payment_client.cancel_payment(payment_id, payload.get("reason") or "Order cancelled")
