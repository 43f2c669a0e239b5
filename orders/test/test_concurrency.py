"""
Two workers racing on the same order through separate database connections.
"""
import threading
from decimal import Decimal
from uuid import uuid4

from django.db import connection
from django.test import TransactionTestCase

from orders.domain.config import OrderConfig
from orders.domain.status import DeliveryType, OrderStatus
from orders.services.dto import OrderItemRequest, OrderRequest, PaymentDetails
from orders.services.orders import OrderService
from orders.test.fakes import FakePaymentClient, FakeProductClient


class ConcurrentWorkflowTest(TransactionTestCase):
    """Exactly one of two simultaneous transitions wins and touches inventory."""

    def setUp(self):
        self.products = FakeProductClient()
        self.payments = FakePaymentClient()
        self.service = OrderService(
            config=OrderConfig(),
            product_client=self.products,
            payment_client=self.payments,
        )
        self.bread = self.products.add_product("sourdough", "10.00")
        self.tart = self.products.add_product("lemon tart", "15.00")
        request = OrderRequest(
            user_id=uuid4(),
            customer_name="Ada Lovelace",
            customer_email="ada@example.com",
            delivery_type=DeliveryType.PICKUP,
            items=[
                OrderItemRequest(product_id=self.bread, quantity=2),
                OrderItemRequest(product_id=self.tart, quantity=1),
            ],
            payment=PaymentDetails(method="CREDIT_CARD", amount=Decimal("37.80")),
        )
        self.order = self.service.create_order(request).order
        self.products.delay = 0.2

    def run_concurrently(self, call, workers=2):
        barrier = threading.Barrier(workers)
        outcomes = []

        def worker():
            try:
                barrier.wait()
                call()
                outcomes.append("ok")
            except Exception as e:
                outcomes.append(type(e).__name__)
            finally:
                connection.close()

        threads = [threading.Thread(target=worker) for _ in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)
        return sorted(outcomes)

    def assert_one_winner(self, outcomes):
        self.assertEqual(len(outcomes), 2)
        self.assertEqual(outcomes.count("ok"), 1, outcomes)
        loser = next(outcome for outcome in outcomes if outcome != "ok")
        self.assertIn(loser, ("InvalidTransition", "ConcurrentModification"))

    def test_confirm_twice(self):
        outcomes = self.run_concurrently(
            lambda: self.service.update_status(self.order.id, OrderStatus.CONFIRMED)
        )

        self.assert_one_winner(outcomes)
        self.assertEqual(self.products.calls_for("consume"), [(self.bread, 2), (self.tart, 1)])
        stored = self.service.get_order(self.order.id)
        self.assertEqual(stored.status, OrderStatus.CONFIRMED)
        self.assertEqual(stored.version, 2)

    def test_cancel_twice(self):
        outcomes = self.run_concurrently(
            lambda: self.service.cancel_order(self.order.id, "customer request")
        )

        self.assert_one_winner(outcomes)
        self.assertEqual(self.products.calls_for("release"), [(self.bread, 2), (self.tart, 1)])
        self.assertEqual(len(self.payments.cancelled), 1)
        self.assertEqual(self.service.get_order(self.order.id).status, OrderStatus.CANCELLED)
