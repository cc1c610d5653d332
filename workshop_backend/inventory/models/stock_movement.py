# inventory/models/stock_movement.py

"""
INVENTORY LEDGER TRAIL

Immutable record of every ledger call (receipt, reserve, confirm,
release, legacy restore).

GUARANTEES:
- Append-only (no updates, no deletes)
- Movement direction validated against reason
- Reservation-linked reasons must reference a reservation
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from products.models import Product

from .reservation import StockReservation
from .stock_level import StockLevel
from .warehouse import Location, Warehouse


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        IN = "IN", "Stock In"
        OUT = "OUT", "Stock Out"
        NONE = "NONE", "No quantity change"

    class Reason(models.TextChoices):
        RECEIPT = "RECEIPT", "Stock Receipt"
        RESERVATION = "RESERVATION", "Reservation"
        RESERVATION_CONFIRM = "RESERVATION_CONFIRM", "Reservation Confirmed"
        RESERVATION_RELEASE = "RESERVATION_RELEASE", "Reservation Released"
        LEGACY_RESTORE = "LEGACY_RESTORE", "Legacy Stock Restore"

    REASON_TO_MOVEMENT = {
        Reason.RECEIPT: MovementType.IN,
        Reason.RESERVATION: MovementType.OUT,
        Reason.RESERVATION_CONFIRM: MovementType.NONE,
        Reason.RESERVATION_RELEASE: MovementType.IN,
        Reason.LEGACY_RESTORE: MovementType.IN,
    }

    RESERVATION_REASONS = {
        Reason.RESERVATION,
        Reason.RESERVATION_CONFIRM,
        Reason.RESERVATION_RELEASE,
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="stock_movements"
    )
    # Legacy restores have no bucket.
    warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="stock_movements",
    )
    location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="stock_movements",
    )
    level = models.ForeignKey(
        StockLevel,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="stock_movements",
    )
    reservation = models.ForeignKey(
        StockReservation,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="movements",
    )
    order = models.ForeignKey(
        "orders.WorkOrder",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    movement_type = models.CharField(max_length=4, choices=MovementType.choices)
    reason = models.CharField(max_length=24, choices=Reason.choices)
    quantity = models.PositiveIntegerField()

    note = models.CharField(max_length=255, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["reason"], name="inv_move_reason_idx"),
            models.Index(fields=["product", "created_at"], name="inv_move_product_created_idx"),
            models.Index(fields=["order", "created_at"], name="inv_move_order_created_idx"),
        ]

    def clean(self):
        if not self.quantity or self.quantity <= 0:
            raise ValidationError("quantity must be greater than zero")

        expected_type = self.REASON_TO_MOVEMENT.get(self.reason)
        if expected_type and self.movement_type != expected_type:
            raise ValidationError(
                f"{self.reason} requires movement_type={expected_type}"
            )

        if self.reason in self.RESERVATION_REASONS and not self.reservation_id:
            raise ValidationError(f"{self.reason} must reference a reservation")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        if not self.movement_type:
            self.movement_type = self.REASON_TO_MOVEMENT.get(self.reason) or ""

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.reason} | {self.quantity}"
