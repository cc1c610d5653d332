# orders/tests/test_lifecycle.py

from itertools import product

from django.test import SimpleTestCase

from orders.models import WorkOrder
from orders.services.lifecycle import ALLOWED_TRANSITIONS, can_transition

Status = WorkOrder.Status

EXPECTED = {
    (Status.PENDING, Status.TO_DO),
    (Status.ASSIGNED, Status.TO_DO),
    (Status.TO_DO, Status.IN_PROGRESS),
    (Status.TO_DO, Status.PAUSED),
    (Status.IN_PROGRESS, Status.PAUSED),
    (Status.IN_PROGRESS, Status.COMPLETED),
    (Status.PAUSED, Status.IN_PROGRESS),
    (Status.PAUSED, Status.COMPLETED),
    (Status.COMPLETED, Status.DELIVERED),
}


class TransitionTableTests(SimpleTestCase):
    def test_every_state_pair_matches_the_table(self):
        for from_status, to_status in product(Status.values, repeat=2):
            with self.subTest(from_status=from_status, to_status=to_status):
                self.assertEqual(
                    can_transition(from_status=from_status, to_status=to_status),
                    (from_status, to_status) in EXPECTED,
                )

    def test_every_state_has_an_entry(self):
        self.assertEqual(set(ALLOWED_TRANSITIONS), set(Status.values))

    def test_delivered_is_terminal(self):
        self.assertEqual(ALLOWED_TRANSITIONS[Status.DELIVERED], set())
