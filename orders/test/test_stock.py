"""
Unit tests for the stock reservation coordinator.
"""
from django.test import SimpleTestCase

from orders.domain.exceptions import StockUnavailable
from orders.services.stock import StockLine, StockReservationCoordinator
from orders.test.fakes import FakeProductClient


class StockReservationCoordinatorTest(SimpleTestCase):
    """Reserve is all-or-nothing; release and consume are best effort."""

    def setUp(self):
        self.products = FakeProductClient()
        self.coordinator = StockReservationCoordinator(self.products)
        self.bread = self.products.add_product("bread", "3.00")
        self.croissant = self.products.add_product("croissant", "2.50")
        self.cake = self.products.add_product("cake", "20.00")
        self.lines = [
            StockLine(self.bread, 2, "bread"),
            StockLine(self.croissant, 4, "croissant"),
            StockLine(self.cake, 1, "cake"),
        ]

    def test_reserve_all(self):
        result = self.coordinator.reserve(self.lines, order_ref="ORD-20240101-1234")
        self.assertTrue(result.ok)
        self.assertEqual(result.succeeded, self.lines)
        self.assertEqual(self.products.calls_for("release"), [])

    def test_refused_reservation_releases_earlier_lines(self):
        self.products.refuse_reserve.add(self.cake)

        with self.assertRaises(StockUnavailable) as ctx:
            self.coordinator.reserve(self.lines)

        self.assertEqual(ctx.exception.product_id, self.cake)
        self.assertEqual(
            self.products.calls_for("release"),
            [(self.bread, 2), (self.croissant, 4)],
        )
        self.assertTrue(ctx.exception.compensation.ok)

    def test_transport_failure_on_reserve_is_stock_unavailable(self):
        self.products.fail_on["reserve"].add(self.croissant)

        with self.assertRaises(StockUnavailable):
            self.coordinator.reserve(self.lines)

        self.assertEqual(self.products.calls_for("release"), [(self.bread, 2)])
        # Nothing after the failing line is attempted
        self.assertNotIn((self.cake, 1), self.products.calls_for("reserve"))

    def test_compensation_failure_is_reported_not_raised(self):
        self.products.refuse_reserve.add(self.cake)
        self.products.fail_on["release"].add(self.bread)

        with self.assertRaises(StockUnavailable) as ctx:
            self.coordinator.reserve(self.lines)

        compensation = ctx.exception.compensation
        self.assertEqual([f.line.product_id for f in compensation.failed], [self.bread])
        self.assertEqual([line.product_id for line in compensation.succeeded], [self.croissant])

    def test_release_continues_past_failures(self):
        self.products.fail_on["release"].add(self.croissant)

        result = self.coordinator.release(self.lines)

        self.assertFalse(result.ok)
        self.assertEqual(len(self.products.calls_for("release")), 3)
        self.assertEqual([f.line.product_id for f in result.failed], [self.croissant])
        self.assertEqual(result.operation, "release")

    def test_consume_every_line_once(self):
        result = self.coordinator.consume(self.lines)
        self.assertTrue(result.ok)
        self.assertEqual(
            self.products.calls_for("consume"),
            [(self.bread, 2), (self.croissant, 4), (self.cake, 1)],
        )
