# orders/services/payments.py

"""
QUICK PAYMENT REGISTER

A payment is appended, then all payments of the order are summed:
    paid == 0          -> pendiente
    0 < paid < total   -> parcial
    paid >= total      -> pagado
Payments never gate a lifecycle transition.
"""

from __future__ import annotations

from decimal import Decimal

from django.db.models import Sum

from orders.models import OrderPayment, WorkOrder
from orders.services.exceptions import OrderValidationError
from orders.services.pricing import money

ZERO = Decimal("0.00")


def derive_payment_status(*, paid, total) -> str:
    paid = money(paid)
    total = money(total)
    if paid <= ZERO:
        return WorkOrder.PaymentStatus.PENDING
    if paid < total:
        return WorkOrder.PaymentStatus.PARTIAL
    return WorkOrder.PaymentStatus.PAID


def register_payment(*, order: WorkOrder, amount, method: str = "", reference: str = "", user=None) -> dict:
    try:
        value = money(amount)
    except Exception as exc:
        raise OrderValidationError("Payment amount must be a valid decimal", code="invalid_payment_amount") from exc

    if value <= ZERO:
        raise OrderValidationError(
            "Payment amount must be greater than zero",
            code="invalid_payment_amount",
            details={"amount": str(amount)},
        )

    payment = OrderPayment.objects.create(
        order=order,
        amount=value,
        method=(method or "efectivo").strip()[:32],
        reference=(reference or "").strip()[:120],
        received_by=user,
    )

    paid = money(
        OrderPayment.objects.filter(order=order).aggregate(total=Sum("amount")).get("total")
    )
    status = derive_payment_status(paid=paid, total=order.total)

    WorkOrder.objects.filter(pk=order.pk).update(amount_paid=paid, payment_status=status)
    order.amount_paid = paid
    order.payment_status = status

    return {
        "payment_id": payment.id,
        "amount": str(value),
        "amount_paid": str(paid),
        "total": str(money(order.total)),
        "payment_status": status,
    }
