"""
Reconciliation queue for non-fatal collaborator failures.

Stock releases and payment calls that fail after an order workflow has
already committed are parked here and retried out of band.
"""
from __future__ import annotations

import logging
from uuid import UUID, uuid4

from django.db import models
from django.db.models import F
from django.utils import timezone

from orders.infra.models import TimeStampedModel


logger = logging.getLogger(__name__)

RELEASE_STOCK = "RELEASE_STOCK"
CREATE_PAYMENT = "CREATE_PAYMENT"
CANCEL_PAYMENT = "CANCEL_PAYMENT"

TASK_KIND_CHOICES = (
    (RELEASE_STOCK, "Release reserved stock"),
    (CREATE_PAYMENT, "Create payment"),
    (CANCEL_PAYMENT, "Cancel payment"),
)


class ReconciliationTask(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    order_id = models.UUIDField()
    kind = models.CharField(max_length=20, choices=TASK_KIND_CHOICES)
    payload = models.JSONField(default=dict)
    last_error = models.TextField(default="", blank=True)
    processed = models.BooleanField(default=False)
    processed_at = models.DateTimeField(null=True, blank=True)
    retry_count = models.IntegerField(default=0)

    class Meta:
        db_table = "order_reconciliation_tasks"
        indexes = [
            models.Index(fields=("processed", "created_at"), name="recon_pending_idx"),
            models.Index(fields=("order_id", "kind"), name="recon_order_kind_idx"),
        ]


class ReconciliationRepository:
    """Repository for reconciliation tasks."""

    def add_task(self, order_id: UUID, kind: str, payload: dict, error: str = "") -> UUID:
        task = ReconciliationTask.objects.create(
            order_id=order_id,
            kind=kind,
            payload=payload,
            last_error=error,
        )
        logger.warning(
            "reconciliation_task_recorded",
            extra={
                "order_id": str(order_id),
                "operation": kind,
                "error": error,
            },
        )
        return task.id

    def get_pending(self, limit: int = 100, max_retries: int | None = None) -> list[ReconciliationTask]:
        """Get unprocessed tasks, oldest first."""
        qs = ReconciliationTask.objects.filter(processed=False)
        if max_retries is not None:
            qs = qs.filter(retry_count__lt=max_retries)
        return list(qs.order_by("created_at")[:limit])

    def get_for_order(self, order_id: UUID) -> list[ReconciliationTask]:
        return list(ReconciliationTask.objects.filter(order_id=order_id).order_by("created_at"))

    def mark_processed(self, task_id: UUID) -> None:
        ReconciliationTask.objects.filter(id=task_id).update(
            processed=True,
            processed_at=timezone.now(),
        )

    def increment_retry(self, task_id: UUID, error: str = "") -> None:
        ReconciliationTask.objects.filter(id=task_id).update(
            retry_count=F("retry_count") + 1,
            last_error=error,
        )
