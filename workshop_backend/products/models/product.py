# products/models/product.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Product(models.Model):
    """
    Represents a spare part / consumable that can be put on a work order.

    STOCK MODEL (IMPORTANT):
    - Stock truth lives in the inventory ledger (inventory.StockLevel buckets
      plus the legacy single-bucket inventory.LegacyStock row).
    - `stock` is a DENORMALIZED aggregate, re-derived by
      inventory.services.sync.sync_product_stock() after every ledger write.
    - Never edit `stock` directly outside that service.
    """

    code = models.CharField(max_length=64, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)

    # Default selling price (orders snapshot their own unit price per line)
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    # Derived field, service-managed only
    stock = models.IntegerField(
        default=0,
        help_text="Sum of available stock across all ledger buckets (derived).",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=Q(stock__gte=0),
                name="chk_product_stock_gte_zero",
            ),
        ]

    def clean(self):
        if self.unit_price is not None and Decimal(self.unit_price) < Decimal("0.00"):
            raise ValidationError({"unit_price": "unit_price cannot be negative"})

    def __str__(self):
        return f"{self.name} ({self.code})"
