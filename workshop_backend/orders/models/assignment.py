# orders/models/assignment.py

from django.db import models

from workshop.models import Worker

from .work_order import WorkOrder


class WorkOrderWorker(models.Model):
    """Secondary ("apoyo") worker on an order. One row per (order, worker)."""

    ROLE_SUPPORT = "apoyo"

    order = models.ForeignKey(
        WorkOrder,
        on_delete=models.CASCADE,
        related_name="roster",
    )
    worker = models.ForeignKey(
        Worker,
        on_delete=models.PROTECT,
        related_name="order_assignments",
    )
    role = models.CharField(max_length=16, default=ROLE_SUPPORT)
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["assigned_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["order", "worker"],
                name="uniq_order_worker",
            ),
        ]

    def __str__(self):
        return f"{self.order.code} | {self.worker} ({self.role})"
