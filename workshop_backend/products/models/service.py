# products/models/service.py

"""
WORKSHOP SERVICE CATALOG

A Service is a unit of labour sold on a work order (oil change, brake
inspection, ...). It carries a duration range expressed in a time unit;
the order engine converts it to minutes to estimate promised completion.
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class TimeUnit(models.TextChoices):
    MINUTES = "minutos", "Minutos"
    HOURS = "horas", "Horas"
    DAYS = "dias", "Días"
    WEEKS = "semanas", "Semanas"


TIME_UNIT_FACTORS = {
    TimeUnit.MINUTES: 1,
    TimeUnit.HOURS: 60,
    TimeUnit.DAYS: 60 * 24,
    TimeUnit.WEEKS: 60 * 24 * 7,
}


def to_minutes(value, unit) -> int:
    """
    Convert a duration in `unit` to whole minutes.
    Unknown units are treated as minutes.
    """
    factor = TIME_UNIT_FACTORS.get(unit, 1)
    return int(round(float(value or 0) * factor))


class Service(models.Model):
    code = models.CharField(max_length=64, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True)

    base_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    min_time = models.PositiveIntegerField(default=0)
    max_time = models.PositiveIntegerField(default=0)
    time_unit = models.CharField(
        max_length=16,
        choices=TimeUnit.choices,
        default=TimeUnit.MINUTES,
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def clean(self):
        if self.max_time < self.min_time:
            raise ValidationError({"max_time": "max_time cannot be lower than min_time"})

    @property
    def min_minutes(self) -> int:
        return to_minutes(self.min_time, self.time_unit)

    @property
    def max_minutes(self) -> int:
        return to_minutes(self.max_time, self.time_unit)

    def __str__(self):
        return f"{self.name} ({self.code})"
