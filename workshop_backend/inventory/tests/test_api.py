# inventory/tests/test_api.py

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from orders.services.order_creation import create_order
from orders.tests.base import OrderFixturesMixin
from permissions.roles import ROLE_ADVISOR, ROLE_WAREHOUSE
from workshop.tests.factories import make_location, make_user, make_warehouse


class InventoryApiTests(OrderFixturesMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(user=make_user("almacen", role=ROLE_WAREHOUSE))

    def test_receipt_loads_bucket(self):
        location = make_location(self.warehouse)
        response = self.client.post(
            "/api/inventory/receipts/",
            {
                "product_id": self.product.id,
                "warehouse_id": self.warehouse.id,
                "location_id": location.id,
                "quantity": 5,
                "note": "Guía 001-2231",
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["quantity_available"], 5)
        self.assertEqual(response.data["location_code"], "A-01")

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 15)

    def test_receipt_with_foreign_location_is_400(self):
        other = make_location(make_warehouse(code="ALM-09", name="Sucursal"), code="B-01")

        response = self.client.post(
            "/api/inventory/receipts/",
            {"product_id": self.product.id, "warehouse_id": self.warehouse.id, "location_id": other.id, "quantity": 1},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "invalid_location")

    def test_advisor_cannot_receive(self):
        client = APIClient()
        client.force_authenticate(user=make_user("asesor", role=ROLE_ADVISOR))
        response = client.post(
            "/api/inventory/receipts/",
            {"product_id": self.product.id, "warehouse_id": self.warehouse.id, "quantity": 1},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_reservations_by_order(self):
        order = create_order(payload=self.payload(), user=self.user).order
        response = self.client.get("/api/inventory/reservations/", {"order": order.id})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        row = response.data["results"][0]
        self.assertEqual(row["status"], "PENDING")
        self.assertEqual(row["order_code"], order.code)
        self.assertEqual(row["quantity"], 2)
