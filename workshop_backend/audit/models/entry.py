# audit/models/entry.py

"""
AUDIT LOG ENTRY (IMMUTABLE)

who / what action / free-text description / affected table.
Created once. Never updated. Never deleted.
"""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

User = settings.AUTH_USER_MODEL


class AuditLogEntry(models.Model):
    class Action(models.TextChoices):
        CREATE_ORDER = "CREATE_ORDEN", "Order created"
        UPDATE_ORDER = "UPDATE_ORDEN", "Order updated"
        DELETE_ORDER = "DELETE_ORDEN", "Order cancelled"

    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_entries",
    )

    action = models.CharField(max_length=32, db_index=True)
    description = models.TextField(blank=True)
    table_name = models.CharField(max_length=64, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Audit entries are immutable")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Audit entries are immutable and cannot be deleted")

    def __str__(self):
        return f"{self.action} on {self.table_name} by {self.user_id}"
