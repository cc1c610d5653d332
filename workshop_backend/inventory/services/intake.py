# inventory/services/intake.py

"""
INBOUND STOCK

- receive_stock()        : load a bucket (RECEIPT movement)
- restore_legacy_stock() : put units back on the legacy single-bucket
                           counter for order lines that were never backed
                           by a reservation (LEGACY_RESTORE movement)

Both re-sync Product.stock.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import F

from inventory.models import LegacyStock, StockLevel, StockMovement
from inventory.services.ledger import require_active_product, to_int_qty, resolve_bucket_scope
from inventory.services.sync import sync_product_stock

logger = logging.getLogger("inventory")


@transaction.atomic
def receive_stock(
    *,
    product,
    warehouse,
    quantity,
    location=None,
    note: str = "",
    metadata: dict | None = None,
    user=None,
) -> StockLevel:
    """
    Add `quantity` units to the (product, warehouse, location) bucket,
    creating the bucket on first receipt.
    """
    qty = to_int_qty(quantity)
    prod = require_active_product(product)
    wh, loc = resolve_bucket_scope(warehouse=warehouse, location=location)

    level, _ = StockLevel.objects.select_for_update().get_or_create(
        product=prod,
        warehouse=wh,
        location=loc,
    )
    StockLevel.objects.filter(pk=level.pk).update(
        quantity_available=F("quantity_available") + qty,
    )
    level.refresh_from_db()

    StockMovement.objects.create(
        product=prod,
        warehouse=wh,
        location=loc,
        level=level,
        reason=StockMovement.Reason.RECEIPT,
        quantity=qty,
        note=(note or "")[:255],
        metadata=metadata or {},
        performed_by=user,
    )
    sync_product_stock(prod)

    logger.info(
        "stock received",
        extra={
            "product_id": prod.id,
            "warehouse_id": wh.id,
            "location_id": loc.id if loc else None,
            "quantity": qty,
        },
    )
    return level


@transaction.atomic
def restore_legacy_stock(*, product, quantity, order=None, note: str = "", user=None) -> int:
    """Return units to the legacy counter (lines of imported historical orders)."""
    qty = to_int_qty(quantity)
    product_id = getattr(product, "pk", product)

    legacy, _ = LegacyStock.objects.select_for_update().get_or_create(product_id=product_id)
    LegacyStock.objects.filter(pk=legacy.pk).update(
        quantity_available=F("quantity_available") + qty,
    )

    StockMovement.objects.create(
        product_id=product_id,
        order_id=getattr(order, "pk", order),
        reason=StockMovement.Reason.LEGACY_RESTORE,
        quantity=qty,
        note=(note or "")[:255],
        performed_by=user,
    )
    return sync_product_stock(product_id)
