# products/tests/test_service_durations.py

from django.core.exceptions import ValidationError
from django.test import SimpleTestCase

from products.models import Service
from products.models.service import TimeUnit, to_minutes


class ServiceDurationTests(SimpleTestCase):
    def test_unit_conversion(self):
        self.assertEqual(to_minutes(45, TimeUnit.MINUTES), 45)
        self.assertEqual(to_minutes(2, TimeUnit.HOURS), 120)
        self.assertEqual(to_minutes(1, TimeUnit.DAYS), 1440)
        self.assertEqual(to_minutes(1, TimeUnit.WEEKS), 10080)

    def test_unknown_unit_counts_as_minutes(self):
        self.assertEqual(to_minutes(15, "lunas"), 15)

    def test_empty_value_is_zero(self):
        self.assertEqual(to_minutes(None, TimeUnit.HOURS), 0)

    def test_service_range_in_minutes(self):
        service = Service(code="SRV-X", name="Diagnóstico", min_time=1, max_time=3, time_unit=TimeUnit.HOURS)
        self.assertEqual(service.min_minutes, 60)
        self.assertEqual(service.max_minutes, 180)

    def test_max_below_min_is_invalid(self):
        service = Service(code="SRV-X", name="Diagnóstico", min_time=5, max_time=2)
        with self.assertRaises(ValidationError):
            service.clean()
