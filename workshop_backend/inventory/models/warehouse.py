# inventory/models/warehouse.py

from django.db import models


class Warehouse(models.Model):
    """
    Physical store room holding stock.

    The order engine uses the first active warehouse (lowest id) as the
    default bucket for product lines that do not name one.
    """

    name = models.CharField(max_length=120)
    code = models.CharField(max_length=32, unique=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.name} ({self.code})"


class Location(models.Model):
    """Shelf / bin inside a warehouse."""

    warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.CASCADE,
        related_name="locations",
    )
    code = models.CharField(max_length=32)
    description = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["warehouse_id", "code"]
        constraints = [
            models.UniqueConstraint(
                fields=["warehouse", "code"],
                name="uniq_location_code_per_warehouse",
            ),
        ]

    def __str__(self):
        return f"{self.warehouse.code}/{self.code}"
