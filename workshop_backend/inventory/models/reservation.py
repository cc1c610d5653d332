# inventory/models/reservation.py

"""
STOCK RESERVATION

A hold against one bucket for one product line of a work order.

LIFECYCLE:
    PENDING -> CONFIRMED   (order completed / delivered)
    PENDING -> RELEASED    (order edited or cancelled)

CONFIRMED and RELEASED are terminal. State changes go through
inventory.services.ledger only.
"""

from django.conf import settings
from django.db import models
from django.db.models import Q

from products.models import Product

from .stock_level import StockLevel
from .warehouse import Location, Warehouse


class StockReservation(models.Model):
    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        CONFIRMED = "CONFIRMED", "Confirmed"
        RELEASED = "RELEASED", "Released"

    level = models.ForeignKey(
        StockLevel,
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reservations",
    )

    order = models.ForeignKey(
        "orders.WorkOrder",
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    # Lines are replaced on edit; the reservation keeps its history.
    line = models.ForeignKey(
        "orders.WorkOrderLine",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reservations",
    )

    quantity = models.PositiveIntegerField()
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )

    reason = models.CharField(max_length=255, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_reservations",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    released_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["order", "status"], name="inv_resv_order_status_idx"),
            models.Index(fields=["product", "status"], name="inv_resv_product_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_reservation_quantity_gt_zero",
            ),
        ]

    @property
    def is_pending(self) -> bool:
        return self.status == self.Status.PENDING

    def __str__(self):
        return f"Reservation {self.id} | {self.product} x{self.quantity} | {self.status}"
