# orders/services/stock.py

"""
Order-level wrappers over the reservation ledger.

- release_pending_reservations(): edit / cancel path
- confirm_pending_reservations(): completado / entregado path
- restore_unreserved_lines(): legacy stock restore for former product lines
  that were never backed by a reservation
"""

from __future__ import annotations

from inventory.models import StockReservation
from inventory.services.intake import restore_legacy_stock
from inventory.services.ledger import confirm_reservation, release_reservation


def _pending(order, *, line_ids=None):
    qs = StockReservation.objects.filter(
        order=order,
        status=StockReservation.Status.PENDING,
    )
    if line_ids is not None:
        qs = qs.filter(line_id__in=list(line_ids))
    return qs.order_by("id")


def release_pending_reservations(*, order, reason: str, motive: str, user=None, line_ids=None) -> list[int]:
    released = []
    for reservation in _pending(order, line_ids=line_ids):
        release_reservation(
            reservation=reservation,
            reason=reason,
            metadata={
                "source": "work_order",
                "order_code": order.code,
                "motive": motive,
            },
            user=user,
        )
        released.append(reservation.id)
    return released


def confirm_pending_reservations(*, order, target_status: str, user=None) -> list[int]:
    confirmed = []
    for reservation in _pending(order):
        confirm_reservation(
            reservation=reservation,
            reason=f"Confirmación de reserva por orden {order.code}",
            metadata={
                "source": "work_order",
                "order_code": order.code,
                "motive": f"confirmacion_por_{target_status}",
            },
            user=user,
        )
        confirmed.append(reservation.id)
    return confirmed


def restore_unreserved_lines(*, order, product_lines, user=None) -> int:
    """
    Former product lines with no reservation at all predate the ledger;
    their stock was taken straight off the legacy counter, so it goes
    back there.

    Only imported historical orders carry such lines. Orders created by
    this engine always reserve against a bucket.
    """
    reserved_line_ids = set(
        StockReservation.objects.filter(
            line_id__in=[line.id for line in product_lines],
        ).values_list("line_id", flat=True)
    )

    restored = 0
    for line in product_lines:
        if line.id in reserved_line_ids:
            continue
        restore_legacy_stock(
            product=line.product_id,
            quantity=line.quantity,
            order=order,
            note=f"Restauración por edición de orden {order.code}",
            user=user,
        )
        restored += 1
    return restored
