# workshop/models/worker.py

from django.conf import settings
from django.db import models


class Worker(models.Model):
    """
    Mechanic / technician that can be assigned to work orders and tasks.

    A worker may optionally be linked to a login account.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="worker_profile",
    )

    full_name = models.CharField(max_length=200)
    specialty = models.CharField(max_length=120, blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["full_name"]

    def __str__(self):
        return self.full_name
