"""
In-memory stand-ins for the product and payment services.
"""
import time
from decimal import Decimal
from uuid import uuid4

from orders.domain.exceptions import ExternalServiceFailure, ProductNotFound
from orders.infra.clients import ProductSnapshot


class FakeProductClient:
    """Catalogue plus stock counters; every call is recorded in ``calls``."""

    def __init__(self):
        self.products = {}
        self.stock = {}
        self.calls = []
        # product ids whose operation should raise / be refused
        self.fail_on = {"reserve": set(), "release": set(), "consume": set(), "availability": set()}
        self.refuse_reserve = set()
        # seconds release and consume take, to widen race windows
        self.delay = 0

    def add_product(self, name, price, stock=100, preparation_time_minutes=None, category="Bread"):
        product_id = uuid4()
        self.products[product_id] = ProductSnapshot(
            product_id=product_id,
            sku=f"SKU-{name.upper()[:6]}",
            name=name,
            price=Decimal(price),
            category=category,
            description=f"Fresh {name}",
            image_url=f"https://img.example.com/{product_id}.png",
            preparation_time_minutes=preparation_time_minutes,
        )
        self.stock[product_id] = stock
        return product_id

    def calls_for(self, operation):
        return [(product_id, quantity) for op, product_id, quantity in self.calls if op == operation]

    def get_product(self, product_id):
        self.calls.append(("get_product", product_id, None))
        if product_id not in self.products:
            raise ProductNotFound(product_id)
        return self.products[product_id]

    def check_availability(self, product_id, quantity):
        self.calls.append(("check_availability", product_id, quantity))
        if product_id in self.fail_on["availability"]:
            raise ExternalServiceFailure("product-service", "check_availability", "timed out")
        return self.stock.get(product_id, 0) >= quantity

    def reserve(self, product_id, quantity):
        self.calls.append(("reserve", product_id, quantity))
        if product_id in self.fail_on["reserve"]:
            raise ExternalServiceFailure("product-service", "reserve", "HTTP 503")
        if product_id in self.refuse_reserve:
            return False
        return True

    def release(self, product_id, quantity):
        self.calls.append(("release", product_id, quantity))
        time.sleep(self.delay)
        if product_id in self.fail_on["release"]:
            raise ExternalServiceFailure("product-service", "release", "HTTP 503")
        return {}

    def consume(self, product_id, quantity):
        self.calls.append(("consume", product_id, quantity))
        time.sleep(self.delay)
        if product_id in self.fail_on["consume"]:
            raise ExternalServiceFailure("product-service", "consume", "HTTP 503")
        return {}


class FakePaymentClient:
    """Payments keyed by order id."""

    def __init__(self):
        self.payments = {}
        self.created = []
        self.cancelled = []
        self.fail_create = False
        self.fail_cancel = False

    def create_payment(self, payload):
        self.created.append(payload)
        if self.fail_create:
            raise ExternalServiceFailure("payment-service", "create_payment", "timed out")
        payment = {"id": str(uuid4()), "status": "PENDING", "orderId": payload["orderId"]}
        self.payments[payload["orderId"]] = payment
        return payment

    def get_payment_by_order(self, order_id):
        return self.payments.get(str(order_id))

    def cancel_payment(self, payment_id, reason):
        self.cancelled.append((payment_id, reason))
        if self.fail_cancel:
            raise ExternalServiceFailure("payment-service", "cancel_payment", "HTTP 500")
        return {"id": payment_id, "status": "CANCELLED"}
