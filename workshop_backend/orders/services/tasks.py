# orders/services/tasks.py

"""
TASK GENERATOR

- One task per service line, never two (Task.line is OneToOne).
- Initial status: por_hacer when a worker is already assigned, else pendiente.
- Estimate: the line's aggregated max minutes, else
  WORK_ORDER_DEFAULT_TASK_MINUTES.

Task creation is a best-effort side effect for the order engine: callers
wrap these functions in outcomes.best_effort().
"""

from __future__ import annotations

import logging

from django.conf import settings

from orders.models import Task, WorkOrderLine

logger = logging.getLogger("orders")


def default_task_minutes() -> int:
    return int(getattr(settings, "WORK_ORDER_DEFAULT_TASK_MINUTES", 60))


def initial_task_status(worker) -> str:
    return Task.Status.TO_DO if worker else Task.Status.PENDING


def estimate_for_line(line: WorkOrderLine) -> int:
    return int(line.max_minutes) if line.max_minutes else default_task_minutes()


def create_task_for_line(*, line: WorkOrderLine, worker=None, status: str | None = None) -> Task:
    if not line.is_service:
        raise ValueError("tasks can only be generated for service lines")

    return Task.objects.create(
        line=line,
        worker=worker,
        status=status or initial_task_status(worker),
        estimated_minutes=estimate_for_line(line),
    )


def promote_pending_tasks(order) -> int:
    """pendiente -> por_hacer for every task under the order."""
    return Task.objects.filter(
        line__order=order,
        status=Task.Status.PENDING,
    ).update(status=Task.Status.TO_DO)


def backfill_tasks(*, order, worker) -> dict:
    """
    Retroactive fix-up once an order has a responsible worker:
    (a) tasks without a worker get this one
    (b) tasks still pendiente become por_hacer
    (c) service lines without a task get one
    """
    tasks = Task.objects.filter(line__order=order)

    assigned = tasks.filter(worker__isnull=True).update(worker=worker)
    promoted = tasks.filter(status=Task.Status.PENDING).update(status=Task.Status.TO_DO)

    missing = WorkOrderLine.objects.filter(
        order=order,
        service__isnull=False,
        task__isnull=True,
    )
    created = 0
    for line in missing:
        create_task_for_line(line=line, worker=worker, status=Task.Status.TO_DO)
        created += 1

    logger.info(
        "tasks backfilled",
        extra={
            "order_id": order.pk,
            "worker_id": getattr(worker, "pk", None),
            "tasks_assigned": assigned,
            "tasks_promoted": promoted,
            "tasks_created": created,
        },
    )
    return {"assigned": assigned, "promoted": promoted, "created": created}
