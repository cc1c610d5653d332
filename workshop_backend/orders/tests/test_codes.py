# orders/tests/test_codes.py

from django.db import IntegrityError
from django.test import TestCase, override_settings

from orders.models import WorkOrder
from orders.services.codes import next_order_code, with_unique_code
from orders.services.exceptions import CodeAllocationError
from workshop.tests.factories import make_customer, make_vehicle


class OrderCodeAllocationTests(TestCase):
    def setUp(self):
        self.customer = make_customer()
        self.vehicle = make_vehicle(self.customer)

    def _insert(self, code):
        return WorkOrder.objects.create(code=code, customer=self.customer, vehicle=self.vehicle)

    def test_first_code_of_the_year(self):
        self.assertEqual(next_order_code(year=2026), "ORD-2026-001")

    def test_sequence_is_per_year(self):
        self._insert("ORD-2025-120")
        self._insert("ORD-2026-009")
        self.assertEqual(next_order_code(year=2026), "ORD-2026-010")
        self.assertEqual(next_order_code(year=2027), "ORD-2027-001")

    def test_sequence_grows_past_three_digits(self):
        self._insert("ORD-2026-999")
        self.assertEqual(next_order_code(year=2026), "ORD-2026-1000")

    def test_conflicting_candidate_is_retried(self):
        self._insert("ORD-2026-001")
        # a concurrent create computed the same candidate first
        candidates = iter(["ORD-2026-001", "ORD-2026-002"])

        order = with_unique_code(self._insert, candidate=lambda: next(candidates))

        self.assertEqual(order.code, "ORD-2026-002")
        self.assertEqual(WorkOrder.objects.count(), 2)

    @override_settings(WORK_ORDER_CODE_MAX_ATTEMPTS=3)
    def test_gives_up_after_max_attempts(self):
        self._insert("ORD-2026-001")
        calls = []

        def stale_candidate():
            calls.append(1)
            return "ORD-2026-001"

        with self.assertRaises(CodeAllocationError) as ctx:
            with_unique_code(self._insert, candidate=stale_candidate)

        self.assertEqual(len(calls), 3)
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(WorkOrder.objects.count(), 1)

    def test_other_integrity_errors_are_not_retried(self):
        calls = []

        def broken_insert(code):
            calls.append(code)
            raise IntegrityError("NOT NULL constraint failed: orders_workorder.customer_id")

        with self.assertRaises(IntegrityError):
            with_unique_code(broken_insert, candidate=lambda: "ORD-2026-050")

        self.assertEqual(calls, ["ORD-2026-050"])
