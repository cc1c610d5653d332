# orders/models/work_order.py

"""
WORK ORDER

Tracks repair / service work for one vehicle of one customer.

RULES:
- status is always one node of the fixed lifecycle graph
  (see orders.services.lifecycle); a DB check constraint backs this.
- Totals are written by the order engine only:
      total = subtotal + tax,  tax = subtotal * WORK_ORDER_TAX_RATE
- Orders are never physically deleted; cancellation sets is_active=False.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q

from workshop.models import Customer, Vehicle, Worker

User = settings.AUTH_USER_MODEL


class WorkOrder(models.Model):
    class Status(models.TextChoices):
        PENDING = "pendiente", "Pendiente"
        ASSIGNED = "asignado", "Asignado"
        TO_DO = "por_hacer", "Por hacer"
        IN_PROGRESS = "en_proceso", "En proceso"
        PAUSED = "pausado", "Pausado"
        COMPLETED = "completado", "Completado"
        DELIVERED = "entregado", "Entregado"

    class Priority(models.TextChoices):
        LOW = "baja", "Baja"
        MEDIUM = "media", "Media"
        HIGH = "alta", "Alta"
        URGENT = "urgente", "Urgente"

    class Mode(models.TextChoices):
        SERVICES_ONLY = "solo_servicios", "Solo servicios"
        SERVICES_AND_PRODUCTS = "servicios_y_productos", "Servicios y productos"

    class PaymentStatus(models.TextChoices):
        PENDING = "pendiente", "Pendiente"
        PARTIAL = "parcial", "Parcial"
        PAID = "pagado", "Pagado"

    code = models.CharField(max_length=32, unique=True)

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name="work_orders",
    )
    vehicle = models.ForeignKey(
        Vehicle,
        on_delete=models.PROTECT,
        related_name="work_orders",
    )
    principal_worker = models.ForeignKey(
        Worker,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="led_work_orders",
    )

    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    priority = models.CharField(
        max_length=16,
        choices=Priority.choices,
        default=Priority.MEDIUM,
    )
    mode = models.CharField(
        max_length=24,
        choices=Mode.choices,
        default=Mode.SERVICES_AND_PRODUCTS,
    )
    notes = models.TextField(blank=True)

    # ----------------------------
    # Money
    # ----------------------------
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    payment_status = models.CharField(
        max_length=16,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )

    # ----------------------------
    # Schedule
    # ----------------------------
    estimated_finish = models.DateTimeField(null=True, blank=True)
    min_duration_minutes = models.PositiveIntegerField(null=True, blank=True)
    max_duration_minutes = models.PositiveIntegerField(null=True, blank=True)
    started_at = models.DateTimeField(null=True, blank=True)
    finished_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    delivered_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="delivered_work_orders",
    )

    is_active = models.BooleanField(default=True, db_index=True)

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_work_orders",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status", "is_active"], name="orders_wo_status_active_idx"),
            models.Index(fields=["created_at"], name="orders_wo_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(status__in=[
                    "pendiente",
                    "asignado",
                    "por_hacer",
                    "en_proceso",
                    "pausado",
                    "completado",
                    "entregado",
                ]),
                name="chk_work_order_status_valid",
            ),
            models.CheckConstraint(
                condition=Q(subtotal__gte=0) & Q(tax__gte=0) & Q(total__gte=0),
                name="chk_work_order_totals_gte_zero",
            ),
        ]

    def __str__(self):
        return f"{self.code} | {self.status}"
