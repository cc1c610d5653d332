# inventory/tests/test_intake.py

from django.test import TestCase

from inventory.models import LegacyStock, StockLevel, StockMovement
from inventory.services.exceptions import InvalidLocationError, InvalidQuantityError
from inventory.services.intake import receive_stock, restore_legacy_stock
from inventory.services.sync import sync_product_stock
from workshop.tests.factories import make_location, make_product, make_warehouse


class StockIntakeTests(TestCase):
    def setUp(self):
        self.warehouse = make_warehouse()
        self.location = make_location(self.warehouse)
        self.product = make_product()

    def test_receipt_creates_bucket_and_movement(self):
        level = receive_stock(product=self.product, warehouse=self.warehouse, location=self.location, quantity=7)

        self.assertEqual(level.quantity_available, 7)
        self.assertEqual(level.location_id, self.location.id)

        movement = StockMovement.objects.get(level=level)
        self.assertEqual(movement.reason, StockMovement.Reason.RECEIPT)
        self.assertEqual(movement.movement_type, StockMovement.MovementType.IN)

    def test_receipts_accumulate_in_one_bucket(self):
        receive_stock(product=self.product, warehouse=self.warehouse, quantity=3)
        receive_stock(product=self.product, warehouse=self.warehouse, quantity=4)

        self.assertEqual(StockLevel.objects.filter(product=self.product).count(), 1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 7)

    def test_receipt_rejects_zero_quantity(self):
        with self.assertRaises(InvalidQuantityError):
            receive_stock(product=self.product, warehouse=self.warehouse, quantity=0)

    def test_receipt_rejects_inactive_warehouse(self):
        self.warehouse.is_active = False
        self.warehouse.save(update_fields=["is_active"])
        with self.assertRaises(InvalidLocationError) as ctx:
            receive_stock(product=self.product, warehouse=self.warehouse, quantity=1)
        self.assertEqual(ctx.exception.code, "invalid_warehouse")

    def test_legacy_restore_counts_towards_product_stock(self):
        receive_stock(product=self.product, warehouse=self.warehouse, quantity=5)
        total = restore_legacy_stock(product=self.product, quantity=2, note="Restauración")

        self.assertEqual(total, 7)
        self.assertEqual(LegacyStock.objects.get(product=self.product).quantity_available, 2)
        self.assertTrue(
            StockMovement.objects.filter(product=self.product, reason=StockMovement.Reason.LEGACY_RESTORE).exists()
        )

    def test_sync_rederives_stock_from_ledger(self):
        receive_stock(product=self.product, warehouse=self.warehouse, quantity=5)
        type(self.product).objects.filter(pk=self.product.pk).update(stock=99)

        self.assertEqual(sync_product_stock(self.product), 5)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 5)
