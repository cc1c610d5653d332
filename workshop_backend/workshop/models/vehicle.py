# workshop/models/vehicle.py

from django.db import models

from .customer import Customer


class Vehicle(models.Model):
    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name="vehicles",
    )

    plate = models.CharField(max_length=20, unique=True)
    brand = models.CharField(max_length=80, blank=True)
    model = models.CharField(max_length=80, blank=True)
    year = models.PositiveIntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["plate"]

    def __str__(self):
        label = " ".join(p for p in (self.brand, self.model) if p)
        return f"{self.plate} ({label})" if label else self.plate
