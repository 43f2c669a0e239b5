"""
Stock reservation coordinator.

Reserve is all-or-nothing per batch: when one line cannot be held, every
line already reserved in the same batch is released before the failure is
reported. Release and consume are best effort per line.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable
from uuid import UUID

from orders.domain.exceptions import OrderServiceError, StockUnavailable
from orders.domain.order import Order


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockLine:
    product_id: UUID
    quantity: int
    product_name: str = ""


@dataclass(frozen=True)
class StockFailure:
    line: StockLine
    error: str


@dataclass
class StockOperationResult:
    operation: str
    succeeded: list[StockLine] = field(default_factory=list)
    failed: list[StockFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def stock_lines_for(order: Order) -> list[StockLine]:
    return [
        StockLine(product_id=item.product_id, quantity=item.quantity, product_name=item.product_name)
        for item in order.items
    ]


class StockReservationCoordinator:
    """Runs reserve/release/consume against the inventory service."""

    def __init__(self, product_client):
        self.product_client = product_client

    def reserve(self, lines: Iterable[StockLine], order_ref: str | None = None) -> StockOperationResult:
        """
        Reserve every line in order, or none of them.

        Raises StockUnavailable after compensating. The release pass result
        is attached as ``compensation`` so callers can park its failures.
        """
        result = StockOperationResult(operation="reserve")
        for line in lines:
            try:
                reserved = self.product_client.reserve(line.product_id, line.quantity)
                error = None if reserved else "insufficient stock"
            except OrderServiceError as e:
                error = str(e)

            if error is None:
                result.succeeded.append(line)
                continue

            logger.warning(
                "stock_reservation_failed",
                extra={
                    "order_number": order_ref,
                    "product_id": str(line.product_id),
                    "operation": "reserve",
                    "error": error,
                },
            )
            compensation = self.release(result.succeeded, order_ref=order_ref)
            raise StockUnavailable(
                f"Failed to reserve stock for product: {line.product_name or line.product_id} ({error})",
                product_id=line.product_id,
                compensation=compensation,
            )
        return result

    def release(self, lines: Iterable[StockLine], order_ref: str | None = None) -> StockOperationResult:
        return self._best_effort("release", self.product_client.release, lines, order_ref)

    def consume(self, lines: Iterable[StockLine], order_ref: str | None = None) -> StockOperationResult:
        return self._best_effort("consume", self.product_client.consume, lines, order_ref)

    def _best_effort(
        self,
        operation: str,
        call: Callable[[UUID, int], object],
        lines: Iterable[StockLine],
        order_ref: str | None,
    ) -> StockOperationResult:
        result = StockOperationResult(operation=operation)
        for line in lines:
            try:
                call(line.product_id, line.quantity)
            except OrderServiceError as e:
                # Keep going: one bad line must not strand the others
                logger.error(
                    f"stock_{operation}_failed",
                    extra={
                        "order_number": order_ref,
                        "product_id": str(line.product_id),
                        "operation": operation,
                        "error": str(e),
                    },
                )
                result.failed.append(StockFailure(line=line, error=str(e)))
            else:
                result.succeeded.append(line)
        return result
