"""
Unit tests for the payment orchestrator.
"""
from decimal import Decimal
from uuid import uuid4

from django.test import SimpleTestCase

from orders.domain.order import Order, OrderItem
from orders.domain.status import OrderStatus
from orders.services.dto import PaymentDetails
from orders.services.payments import PaymentOrchestrator, order_status_for_payment
from orders.test.fakes import FakePaymentClient


class PaymentOrchestratorTest(SimpleTestCase):

    def setUp(self):
        self.payments = FakePaymentClient()
        self.orchestrator = PaymentOrchestrator(self.payments, currency="USD")
        self.order = Order(
            user_id=uuid4(),
            customer_name="Ada",
            customer_email="ada@example.com",
            items=[OrderItem(product_id=uuid4(), quantity=2, unit_price=Decimal("10.00"))],
            total_amount=Decimal("21.60"),
        )

    def test_card_payment_request(self):
        details = PaymentDetails(
            method="credit_card",
            amount=Decimal("21.60"),
            card_last_four="4242",
            card_brand="VISA",
        )
        payload = self.orchestrator.build_payment_request(self.order, details)

        self.assertEqual(payload["orderId"], str(self.order.id))
        self.assertEqual(payload["paymentMethod"], "CREDIT_CARD")
        self.assertEqual(payload["amount"], "21.60")
        self.assertEqual(payload["currencyCode"], "USD")
        self.assertEqual(payload["metadata"], {"cardLastFour": "**** 4242", "cardBrand": "VISA"})

    def test_wallet_metadata(self):
        details = PaymentDetails(method="DIGITAL_WALLET", amount=Decimal("21.60"), digital_wallet_provider="PAYPAL")
        payload = self.orchestrator.build_payment_request(self.order, details)
        self.assertEqual(payload["metadata"], {"digitalWalletProvider": "PAYPAL"})

    def test_initiate_success(self):
        outcome = self.orchestrator.initiate(self.order, PaymentDetails(method="CASH", amount=Decimal("21.60")))
        self.assertTrue(outcome.succeeded)
        self.assertIsNotNone(outcome.payment_id)

    def test_initiate_failure_is_an_outcome(self):
        self.payments.fail_create = True
        outcome = self.orchestrator.initiate(self.order, PaymentDetails(method="CASH", amount=Decimal("21.60")))
        self.assertFalse(outcome.succeeded)
        self.assertIn("create_payment failed", outcome.error)
        self.assertEqual(outcome.payload["orderId"], str(self.order.id))

    def test_cancel_without_payment_is_skipped(self):
        outcome = self.orchestrator.cancel(self.order, "customer request")
        self.assertTrue(outcome.succeeded)
        self.assertTrue(outcome.skipped)
        self.assertEqual(self.payments.cancelled, [])

    def test_cancel_existing_payment(self):
        self.orchestrator.initiate(self.order, PaymentDetails(method="CASH", amount=Decimal("21.60")))
        outcome = self.orchestrator.cancel(self.order, "customer request")
        self.assertTrue(outcome.succeeded)
        self.assertEqual(self.payments.cancelled[0][1], "customer request")

    def test_cancel_failure_is_an_outcome(self):
        self.orchestrator.initiate(self.order, PaymentDetails(method="CASH", amount=Decimal("21.60")))
        self.payments.fail_cancel = True
        outcome = self.orchestrator.cancel(self.order, "customer request")
        self.assertFalse(outcome.succeeded)

    def test_payment_status_mapping(self):
        self.assertEqual(order_status_for_payment("COMPLETED"), OrderStatus.CONFIRMED)
        self.assertEqual(order_status_for_payment("failed"), OrderStatus.CANCELLED)
        self.assertEqual(order_status_for_payment("CANCELLED"), OrderStatus.CANCELLED)
        self.assertIsNone(order_status_for_payment("PROCESSING"))
        self.assertIsNone(order_status_for_payment(None))
