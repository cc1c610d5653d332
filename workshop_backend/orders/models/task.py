# orders/models/task.py

"""
TASK

Unit of mechanical work derived from one service line.
Its status moves independently of the order status.
One task per service line at most (OneToOne).
"""

from django.db import models

from workshop.models import Worker

from .line import WorkOrderLine


class Task(models.Model):
    class Status(models.TextChoices):
        PENDING = "pendiente", "Pendiente"
        TO_DO = "por_hacer", "Por hacer"
        IN_PROGRESS = "en_proceso", "En proceso"
        PAUSED = "pausado", "Pausado"
        COMPLETED = "completado", "Completado"
        VERIFIED = "verificado", "Verificado"

    DONE_STATES = (Status.COMPLETED, Status.VERIFIED)

    line = models.OneToOneField(
        WorkOrderLine,
        on_delete=models.CASCADE,
        related_name="task",
    )
    worker = models.ForeignKey(
        Worker,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="tasks",
    )

    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )

    estimated_minutes = models.PositiveIntegerField(default=60)
    actual_minutes = models.PositiveIntegerField(null=True, blank=True)

    started_at = models.DateTimeField(null=True, blank=True)
    finished_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"Task {self.id} | {self.status}"
