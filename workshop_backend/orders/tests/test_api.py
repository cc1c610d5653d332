# orders/tests/test_api.py

from decimal import Decimal
from unittest import mock

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from inventory.models import StockReservation
from inventory.services.exceptions import ReservationStateError
from orders.models import WorkOrder
from orders.services.order_creation import create_order
from orders.tests.base import OrderFixturesMixin
from permissions.roles import ROLE_MECHANIC, ROLE_WAREHOUSE
from workshop.tests.factories import make_user

ORDERS_URL = "/api/orders/"


class WorkOrderApiTests(OrderFixturesMixin, TestCase):
    """
    HTTP surface of the order engine.

    GUARANTEES:
    - domain errors come back as {"error": {"code", "message", "details"}}
      with 400 / 404 / 409
    - capabilities gate every action
    """

    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def _detail_url(self, order):
        return f"{ORDERS_URL}{order.id}/"

    # --------------------------------------------------
    # CREATE
    # --------------------------------------------------

    def test_create_returns_order_and_summary(self):
        response = self.client.post(
            ORDERS_URL,
            self.payload(principal_worker_id=self.worker.id, priority="alta"),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        order = response.data["order"]
        summary = response.data["summary"]

        self.assertEqual(order["status"], "asignado")
        self.assertEqual(order["priority"], "alta")
        self.assertEqual(Decimal(order["total"]), Decimal("318.60"))
        self.assertEqual(len(order["lines"]), 2)
        self.assertEqual(summary["subtotal"], "270.00")
        self.assertEqual(summary["tax"], "48.60")
        self.assertEqual(summary["progress"]["total"], 1)

        service_line = next(line for line in order["lines"] if line["type"] == "servicio")
        self.assertEqual(service_line["task"]["status"], "por_hacer")

    def test_create_insufficient_stock_is_409(self):
        payload = self.payload(items=[{"item_id": self.product.id, "type": "producto", "quantity": 99}])
        response = self.client.post(ORDERS_URL, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "insufficient_stock")
        self.assertEqual(response.data["error"]["details"]["requested"], 99)
        self.assertFalse(WorkOrder.objects.exists())

    def test_create_unknown_customer_is_400(self):
        response = self.client.post(ORDERS_URL, self.payload(customer_id=555), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "customer_unavailable")

    def test_create_shape_errors_are_400(self):
        response = self.client.post(ORDERS_URL, {"customer_id": self.customer.id}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("vehicle_id", response.data)
        self.assertIn("items", response.data)

    # --------------------------------------------------
    # READ
    # --------------------------------------------------

    def test_list_hides_cancelled_orders_and_filters(self):
        kept = create_order(payload=self.payload(priority="urgente"), user=self.user).order
        dropped = create_order(payload=self.payload(), user=self.user).order
        WorkOrder.objects.filter(pk=dropped.pk).update(is_active=False)

        response = self.client.get(ORDERS_URL)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        codes = [row["code"] for row in response.data["results"]]
        self.assertEqual(codes, [kept.code])

        response = self.client.get(ORDERS_URL, {"priority": "baja"})
        self.assertEqual(response.data["count"], 0)

        response = self.client.get(ORDERS_URL, {"search": "abc-1"})
        self.assertEqual(response.data["count"], 1)

        response = self.client.get(ORDERS_URL, {"search": self.customer.document_number})
        self.assertEqual(response.data["count"], 1)

    def test_progress_action(self):
        order = create_order(payload=self.payload(), user=self.user).order
        response = self.client.get(f"{self._detail_url(order)}progress/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {
            "total": 1,
            "pending": 1,
            "in_progress": 0,
            "completed": 0,
            "verified": 0,
            "percentage": 0,
        })

    def test_retrieve_cancelled_is_404(self):
        order = create_order(payload=self.payload(), user=self.user).order
        WorkOrder.objects.filter(pk=order.pk).update(is_active=False)
        self.assertEqual(self.client.get(self._detail_url(order)).status_code, status.HTTP_404_NOT_FOUND)

    # --------------------------------------------------
    # UPDATE
    # --------------------------------------------------

    def test_patch_transition_and_payment(self):
        order = create_order(payload=self.payload(principal_worker_id=self.worker.id), user=self.user).order

        response = self.client.patch(
            self._detail_url(order),
            {"status": "por_hacer", "payment": {"amount": "50.00", "method": "yape"}},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["order"]["status"], "por_hacer")
        self.assertEqual(response.data["order"]["payment_status"], "parcial")
        self.assertTrue(response.data["payment"]["ok"])
        self.assertEqual(response.data["progress"]["total"], 1)

    def test_patch_invalid_transition_is_409(self):
        order = create_order(payload=self.payload(), user=self.user).order
        response = self.client.patch(self._detail_url(order), {"status": "entregado"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "invalid_transition")
        self.assertEqual(response.data["error"]["details"], {"from": "pendiente", "to": "entregado"})

    def test_patch_null_estimated_finish_clears_it(self):
        order = create_order(payload=self.payload(), user=self.user).order
        response = self.client.patch(self._detail_url(order), {"estimated_finish": None}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data["order"]["estimated_finish"])

    def test_patch_unknown_order_is_404(self):
        response = self.client.patch(f"{ORDERS_URL}424242/", {"notes": "x"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"]["code"], "order_not_found")

    def test_non_numeric_order_id_is_404(self):
        url = f"{ORDERS_URL}abc/"
        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(
            self.client.patch(url, {"notes": "x"}, format="json").status_code,
            status.HTTP_404_NOT_FOUND,
        )
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_404_NOT_FOUND)

    # --------------------------------------------------
    # CANCEL
    # --------------------------------------------------

    def test_delete_cancels_and_releases(self):
        order = create_order(payload=self.payload(), user=self.user).order
        response = self.client.delete(self._detail_url(order))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["is_active"])
        self.assertEqual(
            StockReservation.objects.get(order=order).status,
            StockReservation.Status.RELEASED,
        )

        again = self.client.delete(self._detail_url(order))
        self.assertEqual(again.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(again.data["error"]["code"], "already_cancelled")

    def test_delete_maps_ledger_errors_to_their_status(self):
        order = create_order(payload=self.payload(), user=self.user).order
        failure = ReservationStateError("Reservation 1 is CONFIRMED and cannot be released")

        with mock.patch("orders.services.order_cancellation.release_pending_reservations", side_effect=failure):
            response = self.client.delete(self._detail_url(order))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "reservation_not_pending")
        order.refresh_from_db()
        self.assertTrue(order.is_active)

    # --------------------------------------------------
    # PERMISSIONS
    # --------------------------------------------------

    def test_anonymous_is_rejected(self):
        self.assertEqual(APIClient().get(ORDERS_URL).status_code, status.HTTP_401_UNAUTHORIZED)

    def test_mechanic_can_move_orders_but_not_create_or_charge(self):
        order = create_order(payload=self.payload(principal_worker_id=self.worker.id), user=self.user).order
        client = APIClient()
        client.force_authenticate(user=make_user("mecanico", role=ROLE_MECHANIC))

        self.assertEqual(
            client.post(ORDERS_URL, self.payload(), format="json").status_code,
            status.HTTP_403_FORBIDDEN,
        )
        self.assertEqual(
            client.patch(self._detail_url(order), {"status": "por_hacer"}, format="json").status_code,
            status.HTTP_200_OK,
        )
        response = client.patch(self._detail_url(order), {"payment": {"amount": "10"}}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(client.delete(self._detail_url(order)).status_code, status.HTTP_403_FORBIDDEN)

    def test_warehouse_role_is_read_only(self):
        client = APIClient()
        client.force_authenticate(user=make_user("almacen", role=ROLE_WAREHOUSE))

        self.assertEqual(client.get(ORDERS_URL).status_code, status.HTTP_200_OK)
        self.assertEqual(
            client.post(ORDERS_URL, self.payload(), format="json").status_code,
            status.HTTP_403_FORBIDDEN,
        )
