# inventory/services/sync.py

"""
PRODUCT STOCK AGGREGATE

Product.stock = LegacyStock.quantity_available
              + SUM(StockLevel.quantity_available) over all buckets

Clamped at zero. Called by every ledger write so the denormalized field
never drifts from the ledger rows beneath it.
"""

from __future__ import annotations

from django.db import transaction
from django.db.models import Sum

from inventory.models import LegacyStock, StockLevel
from products.models import Product


def _product_id(product) -> int:
    return getattr(product, "id", product)


@transaction.atomic
def sync_product_stock(product) -> int:
    product_id = _product_id(product)

    legacy = (
        LegacyStock.objects.filter(product_id=product_id)
        .values_list("quantity_available", flat=True)
        .first()
    ) or 0

    buckets = (
        StockLevel.objects.filter(product_id=product_id)
        .aggregate(total=Sum("quantity_available"))
        .get("total")
    ) or 0

    total = max(int(legacy) + int(buckets), 0)
    Product.objects.filter(pk=product_id).update(stock=total)

    if isinstance(product, Product):
        product.stock = total

    return total
