"""
Tests for the order admin.
"""
from django.contrib import admin
from django.test import RequestFactory, SimpleTestCase

from orders.infra.models import OrderItemORM, OrderORM


class OrderAdminTest(SimpleTestCase):

    def setUp(self):
        self.request = RequestFactory().get("/admin/orders/orderorm/")

    def test_workflow_fields_are_read_only(self):
        readonly = admin.site._registry[OrderORM].get_readonly_fields(self.request)

        for field in ("status", "total_amount", "subtotal", "tax_amount", "version", "updated_at"):
            self.assertIn(field, readonly)

    def test_form_edits_customer_fields_only(self):
        form = admin.site._registry[OrderORM].get_form(self.request)

        self.assertIn("customer_name", form.base_fields)
        self.assertIn("delivery_address", form.base_fields)
        self.assertNotIn("status", form.base_fields)
        self.assertNotIn("total_amount", form.base_fields)

    def test_item_prices_are_read_only(self):
        readonly = admin.site._registry[OrderItemORM].get_readonly_fields(self.request)

        self.assertIn("unit_price", readonly)
        self.assertIn("quantity", readonly)
