# inventory/services/ledger.py

"""
STOCK RESERVATION LEDGER

Purpose:
- reserve_stock()        : hold units of one bucket for one order line
- confirm_reservation()  : finalize a hold when the order is completed
- release_reservation()  : give a hold back when the order is edited/cancelled

RULES:
- Quantities are integer units.
- Reserve is a conditional UPDATE (available >= qty) executed by the DB,
  so two concurrent reserves on one bucket are serialized by the store and
  neither can push availability below zero. DB check constraints back this.
- Confirm never touches quantity_available (the units already left it at
  reserve time); it only clears them from quantity_committed.
- Confirm on CONFIRMED is a no-op. Release on RELEASED is a no-op.
- Release on CONFIRMED and confirm on RELEASED are rejected.
- Every call appends a StockMovement and re-syncs Product.stock.

All functions run inside the caller's transaction (atomic savepoint).
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from inventory.models import Location, StockLevel, StockMovement, StockReservation, Warehouse
from inventory.services.exceptions import (
    InsufficientStockError,
    InvalidLocationError,
    InvalidQuantityError,
    ProductUnavailableError,
    ReservationNotFoundError,
    ReservationStateError,
)
from inventory.services.sync import sync_product_stock
from products.models import Product

logger = logging.getLogger("inventory")


# ============================================================
# HELPERS
# ============================================================

def to_int_qty(value) -> int:
    """
    Quantity normalizer.
    HARD RULE: quantities are integer units in this system.
    """
    if isinstance(value, bool):
        raise InvalidQuantityError("quantity must be a whole integer unit")

    if isinstance(value, int):
        qty = value
    elif isinstance(value, str) and value.strip().isdigit():
        qty = int(value.strip())
    else:
        raise InvalidQuantityError("quantity must be a whole integer unit")

    if qty <= 0:
        raise InvalidQuantityError("quantity must be greater than zero")
    return qty


def _pk(obj):
    return getattr(obj, "pk", obj)


def require_active_product(product) -> Product:
    found = Product.objects.filter(pk=_pk(product)).first()
    if found is None or not found.is_active:
        raise ProductUnavailableError(
            f"Product {_pk(product)} does not exist or is inactive",
            details={"product_id": _pk(product)},
        )
    return found


def resolve_bucket_scope(*, warehouse, location=None) -> tuple[Warehouse, Location | None]:
    """
    Validate a (warehouse, location) pair.
    Location, when given, must be active and belong to the warehouse.
    """
    wh = Warehouse.objects.filter(pk=_pk(warehouse), is_active=True).first()
    if wh is None:
        raise InvalidLocationError(
            f"Warehouse {_pk(warehouse)} does not exist or is inactive",
            code="invalid_warehouse",
            details={"warehouse_id": _pk(warehouse)},
        )

    if location in (None, ""):
        return wh, None

    loc = Location.objects.filter(pk=_pk(location), is_active=True).first()
    if loc is None or loc.warehouse_id != wh.id:
        raise InvalidLocationError(
            f"Location {_pk(location)} does not belong to warehouse {wh.id}",
            details={"warehouse_id": wh.id, "location_id": _pk(location)},
        )
    return wh, loc


def _bucket_qs(*, product_id, warehouse_id, location_id):
    return StockLevel.objects.filter(
        product_id=product_id,
        warehouse_id=warehouse_id,
        location_id=location_id,
    )


def _lock_reservation(reservation) -> StockReservation:
    locked = (
        StockReservation.objects.select_for_update()
        .filter(pk=_pk(reservation))
        .first()
    )
    if locked is None:
        raise ReservationNotFoundError(
            f"Reservation {_pk(reservation)} does not exist",
            details={"reservation_id": _pk(reservation)},
        )
    return locked


def _merge_metadata(current, extra) -> dict:
    merged = dict(current or {})
    if extra:
        merged.update(extra)
    return merged


def _record_movement(*, reservation: StockReservation, reason, note="", metadata=None, user=None):
    return StockMovement.objects.create(
        product_id=reservation.product_id,
        warehouse_id=reservation.warehouse_id,
        location_id=reservation.location_id,
        level_id=reservation.level_id,
        reservation=reservation,
        order_id=reservation.order_id,
        reason=reason,
        quantity=reservation.quantity,
        note=(note or "")[:255],
        metadata=metadata or {},
        performed_by=user,
    )


# ============================================================
# RESERVE
# ============================================================

@transaction.atomic
def reserve_stock(
    *,
    product,
    warehouse,
    quantity,
    order,
    line=None,
    location=None,
    reason: str = "",
    metadata: dict | None = None,
    user=None,
) -> StockReservation:
    """
    Hold `quantity` units of one bucket for an order line.

    Fails with InsufficientStockError (and no side effect) when the
    bucket cannot cover the request.
    """
    qty = to_int_qty(quantity)
    prod = require_active_product(product)
    wh, loc = resolve_bucket_scope(warehouse=warehouse, location=location)
    location_id = loc.id if loc else None

    level = (
        _bucket_qs(product_id=prod.id, warehouse_id=wh.id, location_id=location_id)
        .select_for_update()
        .first()
    )
    available = int(level.quantity_available) if level else 0

    updated = 0
    if level is not None:
        updated = StockLevel.objects.filter(
            pk=level.pk,
            quantity_available__gte=qty,
        ).update(
            quantity_available=F("quantity_available") - qty,
            quantity_committed=F("quantity_committed") + qty,
        )

    if not updated:
        raise InsufficientStockError(
            f"Insufficient stock for {prod.name}. Requested: {qty}, Available: {available}",
            details={
                "product_id": prod.id,
                "warehouse_id": wh.id,
                "location_id": location_id,
                "requested": qty,
                "available": available,
            },
        )

    reservation = StockReservation.objects.create(
        level=level,
        product=prod,
        warehouse=wh,
        location=loc,
        order_id=_pk(order),
        line_id=_pk(line) if line is not None else None,
        quantity=qty,
        status=StockReservation.Status.PENDING,
        reason=(reason or "")[:255],
        metadata=metadata or {},
        performed_by=user,
    )

    _record_movement(
        reservation=reservation,
        reason=StockMovement.Reason.RESERVATION,
        note=reason,
        metadata=metadata,
        user=user,
    )
    sync_product_stock(prod)

    logger.info(
        "stock reserved",
        extra={
            "reservation_id": reservation.id,
            "product_id": prod.id,
            "warehouse_id": wh.id,
            "location_id": location_id,
            "quantity": qty,
            "order_id": reservation.order_id,
        },
    )
    return reservation


# ============================================================
# CONFIRM
# ============================================================

@transaction.atomic
def confirm_reservation(
    *,
    reservation,
    reason: str = "",
    metadata: dict | None = None,
    user=None,
) -> StockReservation:
    res = _lock_reservation(reservation)

    if res.status == StockReservation.Status.CONFIRMED:
        return res

    if res.status != StockReservation.Status.PENDING:
        raise ReservationStateError(
            f"Reservation {res.id} is {res.status} and cannot be confirmed",
            details={"reservation_id": res.id, "status": res.status},
        )

    updated = StockLevel.objects.filter(
        pk=res.level_id,
        quantity_committed__gte=res.quantity,
    ).update(quantity_committed=F("quantity_committed") - res.quantity)
    if not updated:
        raise ReservationStateError(
            f"Reservation {res.id} exceeds the committed stock of its bucket",
            code="committed_stock_invalid",
            details={"reservation_id": res.id},
        )

    res.status = StockReservation.Status.CONFIRMED
    res.confirmed_at = timezone.now()
    if reason:
        res.reason = reason[:255]
    res.metadata = _merge_metadata(res.metadata, metadata)
    res.save(update_fields=["status", "confirmed_at", "reason", "metadata", "updated_at"])

    _record_movement(
        reservation=res,
        reason=StockMovement.Reason.RESERVATION_CONFIRM,
        note=reason,
        metadata=metadata,
        user=user,
    )
    sync_product_stock(res.product_id)

    logger.info(
        "reservation confirmed",
        extra={"reservation_id": res.id, "order_id": res.order_id, "quantity": res.quantity},
    )
    return res


# ============================================================
# RELEASE
# ============================================================

@transaction.atomic
def release_reservation(
    *,
    reservation,
    reason: str = "",
    metadata: dict | None = None,
    user=None,
) -> StockReservation:
    res = _lock_reservation(reservation)

    if res.status == StockReservation.Status.RELEASED:
        return res

    if res.status != StockReservation.Status.PENDING:
        raise ReservationStateError(
            f"Reservation {res.id} is {res.status} and cannot be released",
            details={"reservation_id": res.id, "status": res.status},
        )

    updated = StockLevel.objects.filter(
        pk=res.level_id,
        quantity_committed__gte=res.quantity,
    ).update(
        quantity_committed=F("quantity_committed") - res.quantity,
        quantity_available=F("quantity_available") + res.quantity,
    )
    if not updated:
        raise ReservationStateError(
            f"Reservation {res.id} exceeds the committed stock of its bucket",
            code="committed_stock_invalid",
            details={"reservation_id": res.id},
        )

    res.status = StockReservation.Status.RELEASED
    res.released_at = timezone.now()
    if reason:
        res.reason = reason[:255]
    res.metadata = _merge_metadata(res.metadata, metadata)
    res.save(update_fields=["status", "released_at", "reason", "metadata", "updated_at"])

    _record_movement(
        reservation=res,
        reason=StockMovement.Reason.RESERVATION_RELEASE,
        note=reason,
        metadata=metadata,
        user=user,
    )
    sync_product_stock(res.product_id)

    logger.info(
        "reservation released",
        extra={"reservation_id": res.id, "order_id": res.order_id, "quantity": res.quantity},
    )
    return res
