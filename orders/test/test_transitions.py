"""
Unit tests for the order status state machine.
"""
from itertools import product
from uuid import uuid4
from decimal import Decimal

from django.test import SimpleTestCase

from orders.domain.exceptions import InvalidTransition
from orders.domain.order import Order, OrderItem
from orders.domain.status import OrderStatus
from orders.domain.transitions import (
    ALLOWED_TRANSITIONS,
    CANCELLABLE_STATUSES,
    TERMINAL_STATUSES,
    TransitionEffect,
    can_transition,
    validate_transition,
)

EXPECTED = {
    (OrderStatus.PENDING, OrderStatus.CONFIRMED),
    (OrderStatus.PENDING, OrderStatus.CANCELLED),
    (OrderStatus.CONFIRMED, OrderStatus.PREPARING),
    (OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
    (OrderStatus.PREPARING, OrderStatus.READY),
    (OrderStatus.READY, OrderStatus.OUT_FOR_DELIVERY),
    (OrderStatus.READY, OrderStatus.DELIVERED),
    (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED),
}


def make_order(status):
    return Order(
        customer_name="Ada",
        customer_email="ada@example.com",
        status=status,
        items=[OrderItem(product_id=uuid4(), quantity=1, unit_price=Decimal("2.00"))],
    )


class TransitionTableTest(SimpleTestCase):
    """Every pair of statuses is either in the table or rejected."""

    def test_only_listed_transitions_allowed(self):
        for current, new in product(OrderStatus, OrderStatus):
            with self.subTest(current=current, new=new):
                self.assertEqual(can_transition(current, new), (current, new) in EXPECTED)

    def test_rejected_transition_leaves_status_unchanged(self):
        for current, new in product(OrderStatus, OrderStatus):
            if (current, new) in EXPECTED:
                continue
            order = make_order(current)
            with self.subTest(current=current, new=new):
                with self.assertRaises(InvalidTransition) as ctx:
                    order.transition_to(new)
                self.assertEqual(order.status, current)
                self.assertEqual(ctx.exception.from_status, current.value)
                self.assertEqual(ctx.exception.to_status, new.value)

    def test_terminal_and_cancellable_sets(self):
        self.assertEqual(TERMINAL_STATUSES, {OrderStatus.DELIVERED, OrderStatus.CANCELLED})
        self.assertEqual(CANCELLABLE_STATUSES, {OrderStatus.PENDING, OrderStatus.CONFIRMED})
        self.assertEqual(set(ALLOWED_TRANSITIONS), set(OrderStatus))

    def test_effects(self):
        self.assertEqual(validate_transition(OrderStatus.PENDING, OrderStatus.CONFIRMED), TransitionEffect.CONFIRM)
        self.assertEqual(validate_transition(OrderStatus.READY, OrderStatus.DELIVERED), TransitionEffect.COMPLETE)
        self.assertEqual(validate_transition(OrderStatus.CONFIRMED, OrderStatus.CANCELLED), TransitionEffect.CANCEL)
        self.assertEqual(validate_transition(OrderStatus.CONFIRMED, OrderStatus.PREPARING), TransitionEffect.NONE)

    def test_preparing_to_delivered_message(self):
        with self.assertRaisesMessage(InvalidTransition, "from PREPARING to DELIVERED"):
            validate_transition(OrderStatus.PREPARING, OrderStatus.DELIVERED)

    def test_confirmed_cannot_be_confirmed_again(self):
        order = make_order(OrderStatus.PENDING)
        order.transition_to(OrderStatus.CONFIRMED)
        with self.assertRaises(InvalidTransition):
            order.transition_to(OrderStatus.CONFIRMED)

    def test_timestamps_recorded(self):
        order = make_order(OrderStatus.PENDING)
        order.transition_to(OrderStatus.CONFIRMED)
        self.assertIsNotNone(order.confirmed_at)

        order.transition_to(OrderStatus.CANCELLED, reason="customer request")
        self.assertIsNotNone(order.cancelled_at)
        self.assertEqual(order.cancellation_reason, "customer request")
        self.assertTrue(order.is_cancelled)
        self.assertTrue(order.is_terminal)
