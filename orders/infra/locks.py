"""
Per-order locks using PostgreSQL advisory locks.
"""
from contextlib import contextmanager
from uuid import UUID

from django.db import connection


@contextmanager
def order_lock(order_id: UUID):
    """
    Serialize status read-modify-write cycles on one order.

    Must run inside ``transaction.atomic()``: the lock is transaction scoped
    and released on commit or rollback.

    Usage:
        with transaction.atomic(), order_lock(order_id):
            # load, validate, save
            pass

    Other backends have no advisory locks; the versioned update in
    OrderRepository.save still rejects the losing writer there.
    """
    if connection.vendor == "postgresql":
        with connection.cursor() as cursor:
            cursor.execute(
                "SELECT pg_advisory_xact_lock(hashtext(%s)::bigint)",
                [str(order_id)]
            )
    yield
