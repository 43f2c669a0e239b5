"""
Order status state machine.

The table below is the only source of truth for which status changes are
allowed. Callers validate before touching an order's status.
"""
from __future__ import annotations

from enum import Enum

from orders.domain.exceptions import InvalidTransition
from orders.domain.status import OrderStatus


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY}),
    OrderStatus.READY: frozenset({OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED}),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)

CANCELLABLE_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items()
    if OrderStatus.CANCELLED in targets
)


class TransitionEffect(str, Enum):
    """Side effect owed by a successful transition."""
    NONE = "NONE"
    # stamp confirmed_at and consume reserved stock for every item
    CONFIRM = "CONFIRM"
    # stamp completed_at
    COMPLETE = "COMPLETE"
    # stamp cancelled_at and reason; stock and payment handled by the caller
    CANCEL = "CANCEL"


_EFFECTS = {
    OrderStatus.CONFIRMED: TransitionEffect.CONFIRM,
    OrderStatus.DELIVERED: TransitionEffect.COMPLETE,
    OrderStatus.CANCELLED: TransitionEffect.CANCEL,
}


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    return OrderStatus(new) in ALLOWED_TRANSITIONS[OrderStatus(current)]


def validate_transition(current: OrderStatus, new: OrderStatus) -> TransitionEffect:
    """Return the effect of moving ``current`` -> ``new`` or raise InvalidTransition."""
    if not can_transition(current, new):
        raise InvalidTransition(current, new)
    return _EFFECTS.get(OrderStatus(new), TransitionEffect.NONE)
