# orders/tests/test_order_creation.py

from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from audit.models import AuditLogEntry
from inventory.models import StockLevel, StockReservation
from orders.models import Task, WorkOrder, WorkOrderLine, WorkOrderWorker
from orders.services.exceptions import (
    BusinessRuleError,
    OrderValidationError,
    ReferenceUnavailableError,
)
from orders.services.order_creation import create_order
from orders.tests.base import OrderFixturesMixin
from workshop.tests.factories import (
    make_customer,
    make_product,
    make_service,
    make_vehicle,
    make_worker,
    stocked_product,
)


class CreateOrderTests(OrderFixturesMixin, TestCase):
    """
    Order creation.

    GUARANTEES:
    - totals = sum(lines) + 18% tax, 2dp half-up
    - one PENDING reservation per product line
    - one task per service line (por_hacer with a worker, else pendiente)
    - any rejection leaves no order, reservation or stock change behind
    """

    def test_service_and_discounted_product_totals(self):
        result = create_order(payload=self.payload(), user=self.user)
        order = result.order

        self.assertEqual(order.subtotal, Decimal("270.00"))
        self.assertEqual(order.tax, Decimal("48.60"))
        self.assertEqual(order.total, Decimal("318.60"))
        self.assertEqual(result.summary["total"], "318.60")

        product_line = order.lines.get(product=self.product)
        self.assertEqual(product_line.total, Decimal("90.00"))
        self.assertEqual(product_line.service_line.service_id, self.service.id)

        reservations = StockReservation.objects.filter(order=order)
        self.assertEqual(reservations.count(), 1)
        self.assertEqual(reservations.get().status, StockReservation.Status.PENDING)
        self.assertEqual(reservations.get().line_id, product_line.id)

    def test_without_worker_order_and_task_are_pending(self):
        order = create_order(payload=self.payload(), user=self.user).order

        self.assertEqual(order.status, WorkOrder.Status.PENDING)
        task = Task.objects.get(line__order=order)
        self.assertEqual(task.status, Task.Status.PENDING)
        self.assertIsNone(task.worker)

    def test_with_principal_worker_order_is_assigned(self):
        result = create_order(payload=self.payload(principal_worker_id=self.worker.id), user=self.user)
        order = result.order

        self.assertEqual(order.status, WorkOrder.Status.ASSIGNED)
        task = Task.objects.get(line__order=order)
        self.assertEqual(task.status, Task.Status.TO_DO)
        self.assertEqual(task.worker, self.worker)
        self.assertEqual(result.summary["pending_tasks_to_generate"], 0)

    def test_first_secondary_worker_becomes_responsible(self):
        helper = make_worker("Luis Apoyo")
        order = create_order(payload=self.payload(secondary_worker_ids=[helper.id]), user=self.user).order

        self.assertEqual(order.status, WorkOrder.Status.ASSIGNED)
        self.assertIsNone(order.principal_worker)
        self.assertEqual(Task.objects.get(line__order=order).worker, helper)
        self.assertTrue(WorkOrderWorker.objects.filter(order=order, worker=helper, role="apoyo").exists())

    def test_principal_is_not_duplicated_in_roster(self):
        helper = make_worker("Luis Apoyo")
        order = create_order(
            payload=self.payload(
                principal_worker_id=self.worker.id,
                secondary_worker_ids=[self.worker.id, helper.id, helper.id],
            ),
            user=self.user,
        ).order

        roster = list(WorkOrderWorker.objects.filter(order=order).values_list("worker_id", flat=True))
        self.assertEqual(roster, [helper.id])

    def test_code_and_estimates(self):
        result = create_order(payload=self.payload(), user=self.user)
        order = result.order

        year = timezone.now().year
        self.assertEqual(order.code, f"ORD-{year}-001")
        self.assertEqual(order.min_duration_minutes, 30)
        self.assertEqual(order.max_duration_minutes, 60)
        self.assertAlmostEqual(
            order.estimated_finish,
            order.created_at + timedelta(minutes=60),
            delta=timedelta(seconds=5),
        )

    def test_sequence_continues_from_highest_code(self):
        year = timezone.now().year
        WorkOrder.objects.create(code=f"ORD-{year}-041", customer=self.customer, vehicle=self.vehicle)
        WorkOrder.objects.create(code=f"ORD-{year}-007", customer=self.customer, vehicle=self.vehicle)

        order = create_order(payload=self.payload(), user=self.user).order
        self.assertEqual(order.code, f"ORD-{year}-042")

    def test_product_stock_is_held(self):
        create_order(payload=self.payload(), user=self.user)

        level = StockLevel.objects.get(product=self.product, warehouse=self.warehouse)
        self.assertEqual(level.quantity_available, 8)
        self.assertEqual(level.quantity_committed, 2)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 8)

    def test_audit_entry_written_after_commit(self):
        with self.captureOnCommitCallbacks(execute=True):
            order = create_order(payload=self.payload(), user=self.user).order

        entry = AuditLogEntry.objects.get(action=AuditLogEntry.Action.CREATE_ORDER)
        self.assertEqual(entry.user, self.user)
        self.assertEqual(entry.table_name, "work_order")
        self.assertIn(order.code, entry.description)
        self.assertIn("Juan Pérez", entry.description)

    # --------------------------------------------------
    # REJECTIONS (no writes)
    # --------------------------------------------------

    def _assert_nothing_written(self):
        self.assertFalse(WorkOrder.objects.exists())
        self.assertFalse(WorkOrderLine.objects.exists())
        self.assertFalse(StockReservation.objects.exists())
        level = StockLevel.objects.get(product=self.product, warehouse=self.warehouse)
        self.assertEqual(level.quantity_available, 10)
        self.assertEqual(level.quantity_committed, 0)

    def test_quantity_above_stock_is_rejected(self):
        payload = self.payload(items=[{"item_id": self.product.id, "type": "producto", "quantity": 11}])

        with self.assertRaises(BusinessRuleError) as ctx:
            create_order(payload=payload, user=self.user)

        self.assertEqual(ctx.exception.code, "insufficient_stock")
        self.assertEqual(ctx.exception.status_code, 409)
        self._assert_nothing_written()

    def test_two_products_for_one_service_are_rejected(self):
        other = stocked_product(warehouse=self.warehouse, quantity=5, code="PRD-OIL", name="Aceite 5W30")
        payload = self.payload()
        payload["items"].append(
            {"item_id": other.id, "type": "producto", "quantity": 1, "service_ref": self.service.id}
        )
        with self.assertRaises(BusinessRuleError) as ctx:
            create_order(payload=payload, user=self.user)

        self.assertEqual(ctx.exception.code, "duplicate_service_product")
        self.assertEqual(StockLevel.objects.get(product=other).quantity_available, 5)
        self._assert_nothing_written()

    def test_service_ref_must_point_to_a_service_of_the_order(self):
        payload = self.payload(
            items=[{"item_id": self.product.id, "type": "producto", "quantity": 1, "service_ref": 999}]
        )
        with self.assertRaises(OrderValidationError) as ctx:
            create_order(payload=payload, user=self.user)
        self.assertEqual(ctx.exception.code, "invalid_service_ref")

    def test_services_only_mode_rejects_products(self):
        with self.assertRaises(BusinessRuleError) as ctx:
            create_order(payload=self.payload(mode="solo_servicios"), user=self.user)
        self.assertEqual(ctx.exception.code, "products_not_allowed")
        self._assert_nothing_written()

    def test_services_only_order_prices_service_lines(self):
        order = create_order(
            payload=self.payload(
                mode="solo_servicios",
                items=[{"item_id": self.service.id, "quantity": 2}],
            ),
            user=self.user,
        ).order

        self.assertEqual(order.subtotal, Decimal("360.00"))
        self.assertEqual(order.max_duration_minutes, 120)

    def test_no_active_warehouse_rejects_even_service_only_orders(self):
        self.warehouse.is_active = False
        self.warehouse.save(update_fields=["is_active"])

        with self.assertRaises(BusinessRuleError) as ctx:
            create_order(
                payload=self.payload(
                    mode="solo_servicios",
                    items=[{"item_id": self.service.id, "quantity": 1}],
                ),
                user=self.user,
            )

        self.assertEqual(ctx.exception.code, "no_active_warehouse")
        self.assertEqual(ctx.exception.status_code, 409)
        self._assert_nothing_written()
        self.assertFalse(Task.objects.exists())
        self.assertFalse(AuditLogEntry.objects.exists())

    def test_vehicle_of_another_customer_is_rejected(self):
        stranger = make_customer(first_name="Ana", document_number="11111111")
        foreign_vehicle = make_vehicle(stranger, plate="XYZ-999")

        with self.assertRaises(ReferenceUnavailableError) as ctx:
            create_order(payload=self.payload(vehicle_id=foreign_vehicle.id), user=self.user)
        self.assertEqual(ctx.exception.code, "vehicle_mismatch")

    def test_inactive_worker_is_rejected(self):
        idle = make_worker("Inactivo", is_active=False)
        with self.assertRaises(ReferenceUnavailableError) as ctx:
            create_order(payload=self.payload(principal_worker_id=idle.id), user=self.user)
        self.assertEqual(ctx.exception.code, "worker_unavailable")

    def test_line_validation_errors(self):
        cases = [
            ({"item_id": self.service.id, "quantity": 0}, "invalid_quantity"),
            ({"item_id": self.service.id, "quantity": 1, "discount": "120"}, "invalid_discount"),
            ({"item_id": self.service.id, "quantity": 1, "unit_price": "-1"}, "invalid_price"),
            ({"item_id": self.service.id, "type": "kit", "quantity": 1}, "invalid_item_type"),
            ({"item_id": 424242, "quantity": 1}, "item_unavailable"),
        ]
        for item, code in cases:
            with self.subTest(code=code):
                with self.assertRaises((OrderValidationError, ReferenceUnavailableError)) as ctx:
                    create_order(payload=self.payload(items=[item]), user=self.user)
                self.assertEqual(ctx.exception.code, code)

    def test_empty_items_are_rejected(self):
        with self.assertRaises(OrderValidationError) as ctx:
            create_order(payload=self.payload(items=[]), user=self.user)
        self.assertEqual(ctx.exception.code, "items_required")

    # --------------------------------------------------
    # ITEM TYPE RESOLUTION
    # --------------------------------------------------

    def test_undeclared_id_prefers_active_service(self):
        product = make_product(code="PRD-SAME")
        service = make_service(code="SRV-SAME")
        # force the same id in both catalogs
        shared_id = max(product.id, service.id) + 100
        type(product).objects.filter(pk=product.pk).update(id=shared_id)
        type(service).objects.filter(pk=service.pk).update(id=shared_id)

        order = create_order(
            payload=self.payload(items=[{"item_id": shared_id, "quantity": 1}]),
            user=self.user,
        ).order
        self.assertEqual(order.lines.get().service_id, shared_id)

    def test_declared_type_wins(self):
        order = create_order(
            payload=self.payload(items=[{"item_id": self.product.id, "type": "producto", "quantity": 1}]),
            user=self.user,
        ).order
        line = order.lines.get()
        self.assertEqual(line.item_type, "producto")
        self.assertEqual(line.unit_price, Decimal("50.00"))
