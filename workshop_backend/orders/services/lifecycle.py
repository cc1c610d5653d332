# orders/services/lifecycle.py

"""
WORK ORDER LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for WorkOrder entities.

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- No side effects
- Single source of truth
"""

from __future__ import annotations

from orders.models import WorkOrder
from orders.services.exceptions import EditNotAllowedError, InvalidTransitionError

Status = WorkOrder.Status


# ============================================================
# STATE DEFINITIONS
# ============================================================

INITIAL_STATES = {
    Status.PENDING,
    Status.ASSIGNED,
}

TERMINAL_STATES = {
    Status.DELIVERED,
}

ALLOWED_TRANSITIONS = {
    Status.PENDING: {Status.TO_DO},
    Status.ASSIGNED: {Status.TO_DO},
    Status.TO_DO: {Status.IN_PROGRESS, Status.PAUSED},
    Status.IN_PROGRESS: {Status.PAUSED, Status.COMPLETED},
    Status.PAUSED: {Status.IN_PROGRESS, Status.COMPLETED},
    Status.COMPLETED: {Status.DELIVERED},
    Status.DELIVERED: set(),
}

# Reaching any of these confirms the order's pending reservations.
STOCK_CONFIRMING_STATES = {
    Status.COMPLETED,
    Status.DELIVERED,
}

# Full line / vehicle replacement is only allowed here.
EDITABLE_STATES = {
    Status.PENDING,
}


# ============================================================
# DOMAIN RULES
# ============================================================


def is_valid_status(value) -> bool:
    return value in Status.values


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, order: WorkOrder, target_status: str):
    if not can_transition(
        from_status=order.status,
        to_status=target_status,
    ):
        raise InvalidTransitionError(
            f"Order {order.code} cannot transition from "
            f"'{order.status}' to '{target_status}'",
            details={"from": order.status, "to": target_status},
        )


def validate_editable(*, order: WorkOrder):
    if order.status not in EDITABLE_STATES:
        raise EditNotAllowedError(
            f"Order {order.code} can only be edited while '{Status.PENDING}' "
            f"(current: '{order.status}')",
            details={"status": order.status},
        )
