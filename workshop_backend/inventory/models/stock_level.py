# inventory/models/stock_level.py

"""
STOCK BUCKETS

A bucket is the (product, warehouse, location) tuple against which
available quantity is tracked.

BOOKKEEPING:
- quantity_available : free to reserve
- quantity_committed : held by PENDING reservations
- Reserve moves units available -> committed.
- Release moves them back.
- Confirm drops them from committed (they left the building).

Both counters are protected by DB check constraints so no code path,
concurrent or not, can persist a negative bucket.

LEGACY:
- LegacyStock is the single-bucket per-product counter that predates the
  multi-warehouse ledger. It still feeds Product.stock.
"""

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from products.models import Product

from .warehouse import Location, Warehouse


class StockLevel(models.Model):
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="stock_levels",
    )
    warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        related_name="stock_levels",
    )
    location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="stock_levels",
    )

    quantity_available = models.IntegerField(default=0)
    quantity_committed = models.IntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["product_id", "warehouse_id", "location_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "warehouse", "location"],
                condition=Q(location__isnull=False),
                name="uniq_stock_level_bucket",
            ),
            models.UniqueConstraint(
                fields=["product", "warehouse"],
                condition=Q(location__isnull=True),
                name="uniq_stock_level_bucket_no_location",
            ),
            models.CheckConstraint(
                condition=Q(quantity_available__gte=0),
                name="chk_stock_level_available_gte_zero",
            ),
            models.CheckConstraint(
                condition=Q(quantity_committed__gte=0),
                name="chk_stock_level_committed_gte_zero",
            ),
        ]

    def clean(self):
        if self.location_id and self.warehouse_id:
            if self.location.warehouse_id != self.warehouse_id:
                raise ValidationError("Location does not belong to warehouse")

    def __str__(self):
        loc = f"/{self.location.code}" if self.location_id else ""
        return f"{self.product} @ {self.warehouse.code}{loc}: {self.quantity_available}"


class LegacyStock(models.Model):
    product = models.OneToOneField(
        Product,
        on_delete=models.CASCADE,
        related_name="legacy_stock",
    )
    quantity_available = models.IntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity_available__gte=0),
                name="chk_legacy_stock_gte_zero",
            ),
        ]

    def __str__(self):
        return f"{self.product} (legacy): {self.quantity_available}"
