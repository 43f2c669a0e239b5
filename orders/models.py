"""
Expose ORM models for Django's auto-discovery while keeping real definitions
under the infrastructure module.
"""

from orders.infra.models import OrderItemORM, OrderORM
from orders.infra.reconciliation import ReconciliationTask

__all__ = ["OrderORM", "OrderItemORM", "ReconciliationTask"]
