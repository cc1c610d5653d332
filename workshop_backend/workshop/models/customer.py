# workshop/models/customer.py

from django.db import models


class Customer(models.Model):
    """
    Workshop customer (person or company that owns vehicles).

    Customers are never hard-deleted; is_active=False hides them from new orders.
    """

    first_name = models.CharField(max_length=120)
    last_name = models.CharField(max_length=120, blank=True)
    document_number = models.CharField(max_length=32, blank=True, db_index=True)
    phone = models.CharField(max_length=50, blank=True)
    email = models.EmailField(blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["last_name", "first_name"]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self):
        return self.full_name
