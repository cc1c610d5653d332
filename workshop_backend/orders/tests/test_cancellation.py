# orders/tests/test_cancellation.py

from decimal import Decimal

from django.test import TestCase

from audit.models import AuditLogEntry
from inventory.models import StockLevel, StockReservation
from orders.models import WorkOrder
from orders.services.exceptions import BusinessRuleError, OrderNotFoundError, OrderValidationError
from orders.services.order_cancellation import cancel_order
from orders.services.order_creation import create_order
from orders.services.order_update import update_order
from orders.tests.base import OrderFixturesMixin


class CancelOrderTests(OrderFixturesMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.order = create_order(payload=self.payload(), user=self.user).order

    def test_cancel_releases_pending_reservations(self):
        with self.captureOnCommitCallbacks(execute=True):
            cancel_order(order_id=self.order.id, user=self.user)

        self.order.refresh_from_db()
        self.assertFalse(self.order.is_active)

        reservation = StockReservation.objects.get(order=self.order)
        self.assertEqual(reservation.status, StockReservation.Status.RELEASED)
        self.assertEqual(reservation.metadata["motive"], "liberacion_por_anulacion")

        level = StockLevel.objects.get(product=self.product, warehouse=self.warehouse)
        self.assertEqual(level.quantity_available, 10)

        entry = AuditLogEntry.objects.get(action=AuditLogEntry.Action.DELETE_ORDER)
        self.assertIn(self.order.code, entry.description)

    def test_cancel_twice(self):
        cancel_order(order_id=self.order.id, user=self.user)
        with self.assertRaises(OrderValidationError) as ctx:
            cancel_order(order_id=self.order.id, user=self.user)
        self.assertEqual(ctx.exception.code, "already_cancelled")

    def test_cancel_unknown_order(self):
        with self.assertRaises(OrderNotFoundError):
            cancel_order(order_id=987654, user=self.user)

    def test_non_numeric_order_id_is_not_found(self):
        for bad_id in ("abc", "-3", "0", None):
            with self.assertRaises(OrderNotFoundError):
                cancel_order(order_id=bad_id, user=self.user)
            with self.assertRaises(OrderNotFoundError):
                update_order(order_id=bad_id, payload={"notes": "x"}, user=self.user)

    def test_fully_paid_order_cannot_be_cancelled(self):
        update_order(order_id=self.order.id, payload={"payment": {"amount": Decimal("318.60")}}, user=self.user)
        with self.assertRaises(BusinessRuleError) as ctx:
            cancel_order(order_id=self.order.id, user=self.user)
        self.assertEqual(ctx.exception.code, "cancel_paid")

    def test_delivered_order_cannot_be_cancelled(self):
        WorkOrder.objects.filter(pk=self.order.pk).update(status=WorkOrder.Status.DELIVERED)
        with self.assertRaises(BusinessRuleError) as ctx:
            cancel_order(order_id=self.order.id, user=self.user)
        self.assertEqual(ctx.exception.code, "cancel_delivered")
