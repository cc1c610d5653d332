# inventory/tests/test_ledger.py

import random

from django.core.exceptions import ValidationError
from django.test import TestCase

from inventory.models import StockLevel, StockMovement, StockReservation
from inventory.services.exceptions import (
    InsufficientStockError,
    InvalidLocationError,
    InvalidQuantityError,
    ProductUnavailableError,
    ReservationNotFoundError,
    ReservationStateError,
)
from inventory.services.intake import receive_stock
from inventory.services.ledger import confirm_reservation, release_reservation, reserve_stock
from workshop.tests.factories import (
    make_customer,
    make_location,
    make_order,
    make_product,
    make_user,
    make_vehicle,
    make_warehouse,
)


class StockLedgerTests(TestCase):
    """
    Reservation ledger.

    GUARANTEES:
    - available and committed never go negative
    - a failed reservation leaves no trace
    - confirm / release are idempotent on their own terminal state
    - every ledger write leaves a movement and re-syncs Product.stock
    """

    def setUp(self):
        self.user = make_user("warehouse_admin")
        self.warehouse = make_warehouse()
        self.product = make_product()
        receive_stock(product=self.product, warehouse=self.warehouse, quantity=10, user=self.user)

        customer = make_customer()
        self.order = make_order(customer=customer, vehicle=make_vehicle(customer))

    def _level(self):
        return StockLevel.objects.get(product=self.product, warehouse=self.warehouse, location__isnull=True)

    def _reserve(self, quantity, **kwargs):
        return reserve_stock(
            product=self.product,
            warehouse=self.warehouse,
            quantity=quantity,
            order=self.order,
            user=self.user,
            **kwargs,
        )

    # --------------------------------------------------
    # RESERVE
    # --------------------------------------------------

    def test_reserve_moves_units_from_available_to_committed(self):
        reservation = self._reserve(4, reason="Reserva para orden ORD-2026-900")

        level = self._level()
        self.assertEqual(level.quantity_available, 6)
        self.assertEqual(level.quantity_committed, 4)
        self.assertEqual(reservation.status, StockReservation.Status.PENDING)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 6)

        movement = StockMovement.objects.get(reservation=reservation)
        self.assertEqual(movement.reason, StockMovement.Reason.RESERVATION)
        self.assertEqual(movement.movement_type, StockMovement.MovementType.OUT)
        self.assertEqual(movement.order_id, self.order.id)

    def test_reserve_more_than_available_fails_without_side_effects(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            self._reserve(11)

        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(ctx.exception.details["available"], 10)
        self.assertEqual(StockReservation.objects.count(), 0)
        self.assertEqual(self._level().quantity_available, 10)

    def test_reserve_on_missing_bucket_is_insufficient(self):
        other = make_warehouse(code="ALM-02")
        with self.assertRaises(InsufficientStockError):
            reserve_stock(product=self.product, warehouse=other, quantity=1, order=self.order)

    def test_reserve_rejects_bad_quantities(self):
        for bad in (0, -1, "abc", "1.5", True, None):
            with self.subTest(quantity=bad):
                with self.assertRaises(InvalidQuantityError):
                    self._reserve(bad)

    def test_reserve_accepts_digit_strings(self):
        reservation = self._reserve("3")
        self.assertEqual(reservation.quantity, 3)

    def test_reserve_rejects_inactive_product(self):
        self.product.is_active = False
        self.product.save(update_fields=["is_active"])
        with self.assertRaises(ProductUnavailableError):
            self._reserve(1)

    def test_location_must_belong_to_warehouse(self):
        other = make_warehouse(code="ALM-02")
        foreign_location = make_location(other)
        with self.assertRaises(InvalidLocationError):
            self._reserve(1, location=foreign_location)

    # --------------------------------------------------
    # CONFIRM
    # --------------------------------------------------

    def test_confirm_consumes_committed_units(self):
        reservation = self._reserve(4)
        confirmed = confirm_reservation(reservation=reservation, reason="Confirmación")

        level = self._level()
        self.assertEqual(confirmed.status, StockReservation.Status.CONFIRMED)
        self.assertIsNotNone(confirmed.confirmed_at)
        self.assertEqual(level.quantity_available, 6)
        self.assertEqual(level.quantity_committed, 0)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 6)

    def test_confirm_twice_is_a_no_op(self):
        reservation = self._reserve(2)
        confirm_reservation(reservation=reservation)
        movements = StockMovement.objects.count()

        again = confirm_reservation(reservation=reservation)

        self.assertEqual(again.status, StockReservation.Status.CONFIRMED)
        self.assertEqual(StockMovement.objects.count(), movements)
        self.assertEqual(self._level().quantity_committed, 0)

    def test_confirm_released_reservation_fails(self):
        reservation = self._reserve(2)
        release_reservation(reservation=reservation)
        with self.assertRaises(ReservationStateError):
            confirm_reservation(reservation=reservation)

    def test_confirm_unknown_reservation(self):
        with self.assertRaises(ReservationNotFoundError) as ctx:
            confirm_reservation(reservation=999999)
        self.assertEqual(ctx.exception.status_code, 404)

    # --------------------------------------------------
    # RELEASE
    # --------------------------------------------------

    def test_release_returns_units_to_available(self):
        reservation = self._reserve(4)
        released = release_reservation(reservation=reservation, metadata={"motive": "liberacion_por_anulacion"})

        level = self._level()
        self.assertEqual(released.status, StockReservation.Status.RELEASED)
        self.assertEqual(released.metadata["motive"], "liberacion_por_anulacion")
        self.assertEqual(level.quantity_available, 10)
        self.assertEqual(level.quantity_committed, 0)

        movement = StockMovement.objects.get(
            reservation=reservation,
            reason=StockMovement.Reason.RESERVATION_RELEASE,
        )
        self.assertEqual(movement.reason, StockMovement.Reason.RESERVATION_RELEASE)
        self.assertEqual(movement.movement_type, StockMovement.MovementType.IN)

    def test_release_twice_is_a_no_op(self):
        reservation = self._reserve(4)
        release_reservation(reservation=reservation)
        release_reservation(reservation=reservation)
        self.assertEqual(self._level().quantity_available, 10)

    def test_release_confirmed_reservation_fails(self):
        reservation = self._reserve(4)
        confirm_reservation(reservation=reservation)
        with self.assertRaises(ReservationStateError):
            release_reservation(reservation=reservation)

    # --------------------------------------------------
    # INVARIANTS
    # --------------------------------------------------

    def test_random_operation_sequences_never_go_negative(self):
        rng = random.Random(20261019)
        pending = []

        for _ in range(60):
            op = rng.choice(["reserve", "confirm", "release"])
            if op == "reserve":
                try:
                    pending.append(self._reserve(rng.randint(1, 5)))
                except InsufficientStockError:
                    pass
            elif pending:
                reservation = pending.pop(rng.randrange(len(pending)))
                if op == "confirm":
                    confirm_reservation(reservation=reservation)
                else:
                    release_reservation(reservation=reservation)

            level = self._level()
            self.assertGreaterEqual(level.quantity_available, 0)
            self.assertGreaterEqual(level.quantity_committed, 0)

            open_units = sum(
                StockReservation.objects.filter(status=StockReservation.Status.PENDING)
                .values_list("quantity", flat=True)
            )
            self.assertEqual(level.quantity_committed, open_units)

    def test_movements_are_immutable(self):
        movement = StockMovement.objects.first()
        movement.note = "edited"
        with self.assertRaises(ValidationError):
            movement.save()
        with self.assertRaises(ValidationError):
            movement.delete()
