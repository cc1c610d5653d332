# orders/services/order_update.py

"""
WORK ORDER UPDATE (APPLICATION SERVICE)

One request may combine: a status transition, a principal worker
assignment, a full line / vehicle replacement, roster changes, a quick
payment and plain field updates (priority, notes, estimated finish).

ORDER OF OPERATIONS (single transaction):
1) lock the order (404 when missing or cancelled)
2) validate the requested status against the lifecycle table
3) line / vehicle replacement only while "pendiente"
4) principal worker assignment ("pendiente" -> "asignado" when no status given)
5) line replacement:
     release PENDING reservations -> delete tasks -> delete lines
     -> restore legacy stock -> validate & price -> recreate -> totals
6) "por_hacer" preconditions: >= 1 service line and a principal worker
7) apply status + first-time timestamps + reservation confirmation
8) retroactive task fix-up (best-effort)
9) roster add / remove (idempotent)
10) quick payment (best-effort)
11) UPDATE_ORDEN audit entry after commit
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from audit.models import AuditLogEntry
from audit.services.log import log_event_on_commit
from orders.models import Task, WorkOrder, WorkOrderLine, WorkOrderWorker
from orders.services.exceptions import (
    BusinessRuleError,
    OrderNotFoundError,
    OrderValidationError,
)
from orders.services.lifecycle import (
    STOCK_CONFIRMING_STATES,
    is_valid_status,
    validate_editable,
    validate_transition,
)
from orders.services.materialize import materialize_lines
from orders.services.outcomes import SideEffectOutcome, best_effort
from orders.services.payments import derive_payment_status, register_payment
from orders.services.pricing import (
    price_lines,
    resolve_vehicle,
    resolve_worker,
    resolve_workers,
    to_positive_int,
)
from orders.services.progress import compute_progress
from orders.services.stock import (
    confirm_pending_reservations,
    release_pending_reservations,
    restore_unreserved_lines,
)
from orders.services.tasks import backfill_tasks, initial_task_status, promote_pending_tasks

logger = logging.getLogger("orders")

Status = WorkOrder.Status


@dataclass(frozen=True)
class OrderUpdate:
    order: WorkOrder
    progress: dict
    payment: SideEffectOutcome | None
    changed_fields: tuple[str, ...]
    side_effects: tuple[SideEffectOutcome, ...] = ()


def lock_active_order(order_id) -> WorkOrder:
    pk = to_positive_int(order_id)
    order = WorkOrder.objects.select_for_update().filter(pk=pk).first() if pk else None
    if order is None or not order.is_active:
        raise OrderNotFoundError(
            f"Order {order_id} not found",
            details={"order_id": order_id},
        )
    return order


def _replace_lines(*, order: WorkOrder, items, user) -> dict:
    existing = list(order.lines.all())
    existing_ids = [line.id for line in existing]
    former_product_lines = [line for line in existing if line.product_id]

    released = release_pending_reservations(
        order=order,
        reason="Liberación por edición de orden",
        motive="liberacion_por_edicion",
        user=user,
        line_ids=existing_ids,
    )

    Task.objects.filter(line_id__in=existing_ids).delete()
    restored = restore_unreserved_lines(order=order, product_lines=former_product_lines, user=user)

    WorkOrderLine.objects.filter(order=order).delete()

    priced = price_lines(items=items, mode=order.mode)

    worker = order.principal_worker
    materialized = materialize_lines(
        order=order,
        priced=priced,
        worker=worker,
        task_status=initial_task_status(worker),
        user=user,
    )

    order.subtotal = priced.subtotal
    order.tax = priced.tax
    order.total = priced.total
    order.min_duration_minutes = priced.min_minutes or None
    order.max_duration_minutes = priced.max_minutes or None
    order.payment_status = derive_payment_status(paid=order.amount_paid, total=order.total)

    return {
        "released": released,
        "legacy_restored": restored,
        "task_outcomes": materialized.task_outcomes,
    }


def _check_to_do_preconditions(order: WorkOrder) -> None:
    if not order.lines.filter(service__isnull=False).exists():
        raise BusinessRuleError(
            "The order must have at least one service line",
            code="service_line_required",
        )
    if not order.principal_worker_id:
        raise BusinessRuleError(
            "The order must have a principal worker assigned",
            code="principal_worker_required",
        )


def _apply_status(*, order: WorkOrder, target: str, user) -> list[int]:
    now = timezone.now()
    order.status = target

    if target == Status.IN_PROGRESS and not order.started_at:
        order.started_at = now
    if target == Status.COMPLETED and not order.finished_at:
        order.finished_at = now
    if target == Status.DELIVERED and not order.delivered_at:
        order.delivered_at = now
        order.delivered_by = user

    if target == Status.TO_DO:
        promote_pending_tasks(order)

    if target in STOCK_CONFIRMING_STATES:
        return confirm_pending_reservations(order=order, target_status=target, user=user)
    return []


def _update_roster(*, order: WorkOrder, add, remove_ids) -> tuple[int, int]:
    added = 0
    for worker in add:
        if worker.pk == order.principal_worker_id:
            continue
        _, created = WorkOrderWorker.objects.get_or_create(
            order=order,
            worker=worker,
            defaults={"role": WorkOrderWorker.ROLE_SUPPORT},
        )
        added += int(created)

    removed, _ = WorkOrderWorker.objects.filter(
        order=order,
        worker_id__in=remove_ids,
    ).delete()
    return added, removed


@transaction.atomic
def update_order(*, order_id, payload: dict, user) -> OrderUpdate:
    order = lock_active_order(order_id)
    changed: list[str] = []
    side_effects: list[SideEffectOutcome] = []

    # ---------------------------------------------------------
    # 1) status validation (no writes yet)
    # ---------------------------------------------------------
    target = payload.get("status") or None
    if target is not None:
        if not is_valid_status(target):
            raise OrderValidationError(
                f"Unknown order status '{target}'",
                code="invalid_status",
                details={"status": target},
            )
        validate_transition(order=order, target_status=target)

    items = payload.get("items")
    vehicle_id = payload.get("vehicle_id")
    if items is not None or vehicle_id not in (None, ""):
        validate_editable(order=order)

    assign_id = payload.get("assign_worker")
    add_workers = resolve_workers(payload.get("add_workers"), field_name="add_workers")
    remove_ids = [i for i in (to_positive_int(raw) for raw in payload.get("remove_workers") or []) if i]

    # ---------------------------------------------------------
    # 2) plain fields
    # ---------------------------------------------------------
    priority = payload.get("priority")
    if priority:
        if priority not in WorkOrder.Priority.values:
            raise OrderValidationError(
                f"Unknown priority '{priority}'",
                code="invalid_priority",
                details={"priority": priority},
            )
        order.priority = priority
        changed.append("priority")

    if "estimated_finish" in payload:
        order.estimated_finish = payload.get("estimated_finish")
        changed.append("estimated_finish")

    if isinstance(payload.get("notes"), str):
        order.notes = payload["notes"]
        changed.append("notes")

    # ---------------------------------------------------------
    # 3) principal worker
    # ---------------------------------------------------------
    assigned_worker = None
    if assign_id not in (None, ""):
        assigned_worker = resolve_worker(assign_id, field_name="assign_worker")
        order.principal_worker = assigned_worker
        changed.append("principal_worker")
        if order.status == Status.PENDING and target is None:
            order.status = Status.ASSIGNED
            changed.append("status")

    # ---------------------------------------------------------
    # 4) vehicle + line replacement
    # ---------------------------------------------------------
    if vehicle_id not in (None, ""):
        order.vehicle = resolve_vehicle(vehicle_id=vehicle_id, customer=order.customer)
        changed.append("vehicle")

    if items is not None:
        replaced = _replace_lines(order=order, items=items, user=user)
        side_effects.extend(replaced["task_outcomes"])
        changed.extend(["items", "subtotal", "tax", "total"])

    # ---------------------------------------------------------
    # 5) status transition
    # ---------------------------------------------------------
    if target is not None:
        if target == Status.TO_DO:
            _check_to_do_preconditions(order)
        _apply_status(order=order, target=target, user=user)
        if "status" not in changed:
            changed.append("status")

    order.save()

    # ---------------------------------------------------------
    # 6) retroactive tasks (best-effort)
    # ---------------------------------------------------------
    if assigned_worker is not None or payload.get("generate_missing_tasks") is True:
        worker = assigned_worker or order.principal_worker
        if worker is not None:
            side_effects.append(best_effort("task_backfill", backfill_tasks, order=order, worker=worker))

    # ---------------------------------------------------------
    # 7) roster
    # ---------------------------------------------------------
    if add_workers or remove_ids:
        added, removed = _update_roster(order=order, add=add_workers, remove_ids=remove_ids)
        if added or removed:
            changed.append("roster")

    # ---------------------------------------------------------
    # 8) quick payment (best-effort)
    # ---------------------------------------------------------
    payment_outcome = None
    payment = payload.get("payment")
    if payment and payment.get("amount") not in (None, ""):
        payment_outcome = best_effort(
            "payment_register",
            register_payment,
            order=order,
            amount=payment.get("amount"),
            method=payment.get("method") or "",
            reference=payment.get("reference") or "",
            user=user,
        )
        if payment_outcome.ok:
            changed.append("payment")

    progress = compute_progress(order)

    log_event_on_commit(
        user=user,
        action=AuditLogEntry.Action.UPDATE_ORDER,
        description=f"Actualización orden {order.code}: {', '.join(changed) or 'sin cambios'}",
        table_name="work_order",
    )

    logger.info(
        "work order updated",
        extra={"order_id": order.pk, "code": order.code, "changed": changed},
    )

    return OrderUpdate(
        order=order,
        progress=progress,
        payment=payment_outcome,
        changed_fields=tuple(changed),
        side_effects=tuple(side_effects),
    )
