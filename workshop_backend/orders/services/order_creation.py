# orders/services/order_creation.py

"""
WORK ORDER CREATION (APPLICATION SERVICE)

Flow:
1) Validate & price the whole request (no writes on failure)
2) Inside one transaction:
   - insert the order under a freshly allocated ORD-<year>-<seq> code
     (bounded retry on code conflicts)
   - secondary roster (principal is never duplicated as "apoyo")
   - service lines + tasks (tasks best-effort)
   - product lines + PENDING reservations (fatal on failure)
3) CREATE_ORDEN audit entry after commit

Initial assignment:
- responsible worker = principal, else first secondary
- with a responsible worker: order "asignado", tasks "por_hacer"
- without:                   order "pendiente", tasks "pendiente"
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from audit.models import AuditLogEntry
from audit.services.log import log_event_on_commit
from orders.models import WorkOrder, WorkOrderWorker
from orders.services.codes import with_unique_code
from orders.services.exceptions import OrderValidationError
from orders.services.materialize import materialize_lines
from orders.services.pricing import validate_order_payload
from orders.services.progress import compute_progress
from orders.services.tasks import initial_task_status

logger = logging.getLogger("orders")


@dataclass(frozen=True)
class OrderCreation:
    order: WorkOrder
    summary: dict


def _normalize_priority(value) -> str:
    priority = value or WorkOrder.Priority.MEDIUM
    if priority not in WorkOrder.Priority.values:
        raise OrderValidationError(
            f"Unknown priority '{priority}'",
            code="invalid_priority",
            details={"priority": priority},
        )
    return priority


@transaction.atomic
def create_order(*, payload: dict, user) -> OrderCreation:
    validated = validate_order_payload(
        customer_id=payload.get("customer_id"),
        vehicle_id=payload.get("vehicle_id"),
        items=payload.get("items") or [],
        principal_worker_id=payload.get("principal_worker_id"),
        secondary_worker_ids=payload.get("secondary_worker_ids"),
        mode=payload.get("mode"),
    )
    priority = _normalize_priority(payload.get("priority"))
    priced = validated.priced
    principal = validated.principal_worker

    responsible = principal or (validated.secondary_workers[0] if validated.secondary_workers else None)
    order_status = WorkOrder.Status.ASSIGNED if responsible else WorkOrder.Status.PENDING
    task_status = initial_task_status(responsible)

    now = timezone.now()
    estimated_finish = payload.get("estimated_finish") or priced.estimate_finish(now=now)

    def _insert(code: str) -> WorkOrder:
        return WorkOrder.objects.create(
            code=code,
            customer=validated.customer,
            vehicle=validated.vehicle,
            principal_worker=principal,
            status=order_status,
            priority=priority,
            mode=validated.mode,
            notes=payload.get("notes") or "",
            subtotal=priced.subtotal,
            tax=priced.tax,
            total=priced.total,
            estimated_finish=estimated_finish,
            min_duration_minutes=priced.min_minutes or None,
            max_duration_minutes=priced.max_minutes or None,
            created_by=user,
        )

    order = with_unique_code(_insert)

    for worker in validated.secondary_workers:
        if principal and worker.pk == principal.pk:
            continue
        WorkOrderWorker.objects.get_or_create(
            order=order,
            worker=worker,
            defaults={"role": WorkOrderWorker.ROLE_SUPPORT},
        )

    materialized = materialize_lines(
        order=order,
        priced=priced,
        worker=responsible,
        task_status=task_status,
        user=user,
    )

    log_event_on_commit(
        user=user,
        action=AuditLogEntry.Action.CREATE_ORDER,
        description=f"Orden creada: {order.code} - Cliente: {validated.customer.full_name}",
        table_name="work_order",
    )

    logger.info(
        "work order created",
        extra={
            "order_id": order.pk,
            "code": order.code,
            "service_lines": len(materialized.service_lines),
            "product_lines": len(materialized.product_lines),
            "tasks_failed": materialized.tasks_failed,
        },
    )

    summary = {
        "subtotal": str(priced.subtotal),
        "tax": str(priced.tax),
        "total": str(priced.total),
        "pending_tasks_to_generate": 0 if responsible else len(priced.service_lines),
        "estimated_min_minutes": priced.min_minutes,
        "estimated_max_minutes": priced.max_minutes,
        "estimated_finish": order.estimated_finish.isoformat() if order.estimated_finish else None,
        "side_effects": [o.as_dict() for o in materialized.task_outcomes if not o.ok],
        "progress": compute_progress(order),
    }
    return OrderCreation(order=order, summary=summary)
