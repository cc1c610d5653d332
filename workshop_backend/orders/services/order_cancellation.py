# orders/services/order_cancellation.py

"""
WORK ORDER CANCELLATION (soft delete)

RULES:
- Already cancelled        -> 400
- Delivered ("entregado")  -> 409
- Fully paid ("pagado")    -> 409
- Otherwise: is_active=False and every PENDING reservation is released,
  so the stock becomes available to other orders again.
- DELETE_ORDEN audit entry after commit.

The row is never physically deleted.
"""

from __future__ import annotations

import logging

from django.db import transaction

from audit.models import AuditLogEntry
from audit.services.log import log_event_on_commit
from orders.models import WorkOrder
from orders.services.exceptions import BusinessRuleError, OrderNotFoundError, OrderValidationError
from orders.services.pricing import to_positive_int
from orders.services.stock import release_pending_reservations

logger = logging.getLogger("orders")


@transaction.atomic
def cancel_order(*, order_id, user) -> WorkOrder:
    pk = to_positive_int(order_id)
    order = WorkOrder.objects.select_for_update().filter(pk=pk).first() if pk else None
    if order is None:
        raise OrderNotFoundError(
            f"Order {order_id} not found",
            details={"order_id": order_id},
        )

    if not order.is_active:
        raise OrderValidationError(
            f"Order {order.code} is already cancelled",
            code="already_cancelled",
        )

    if order.status == WorkOrder.Status.DELIVERED:
        raise BusinessRuleError(
            f"Order {order.code} was already delivered and cannot be cancelled",
            code="cancel_delivered",
        )

    if order.payment_status == WorkOrder.PaymentStatus.PAID:
        raise BusinessRuleError(
            f"Order {order.code} is fully paid and cannot be cancelled",
            code="cancel_paid",
        )

    released = release_pending_reservations(
        order=order,
        reason="Liberación por anulación de orden",
        motive="liberacion_por_anulacion",
        user=user,
    )

    order.is_active = False
    order.save(update_fields=["is_active", "updated_at"])

    log_event_on_commit(
        user=user,
        action=AuditLogEntry.Action.DELETE_ORDER,
        description=f"Orden anulada: {order.code}",
        table_name="work_order",
    )

    logger.info(
        "work order cancelled",
        extra={"order_id": order.pk, "code": order.code, "released": len(released)},
    )
    return order
