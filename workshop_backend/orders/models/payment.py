# orders/models/payment.py

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q

from .work_order import WorkOrder


class OrderPayment(models.Model):
    """
    Lightweight payment registered against a work order.
    Does not gate any lifecycle transition.
    """

    order = models.ForeignKey(
        WorkOrder,
        on_delete=models.PROTECT,
        related_name="payments",
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    method = models.CharField(max_length=32, default="efectivo")
    reference = models.CharField(max_length=120, blank=True)

    received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_payments",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=Decimal("0.00")),
                name="chk_order_payment_amount_gt_zero",
            ),
        ]

    def __str__(self):
        return f"{self.order.code} | {self.amount} ({self.method})"
