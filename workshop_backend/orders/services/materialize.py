# orders/services/materialize.py

"""
LINE MATERIALIZATION

Writes a priced line set onto an order (used by create and by edit):

1) service lines, each followed by its task (best-effort)
2) product lines, linked to their service line when service_ref is set,
   each followed by a PENDING reservation against its bucket

Reservation failures are fatal (they roll the whole operation back);
task failures are logged and reported in the returned outcomes.
"""

from __future__ import annotations

from dataclasses import dataclass

from inventory.services.ledger import reserve_stock
from orders.models import WorkOrder, WorkOrderLine
from orders.services.outcomes import SideEffectOutcome, best_effort
from orders.services.pricing import PricedLines
from orders.services.tasks import create_task_for_line


@dataclass(frozen=True)
class MaterializedLines:
    service_lines: tuple[WorkOrderLine, ...]
    product_lines: tuple[WorkOrderLine, ...]
    reservation_ids: tuple[int, ...]
    task_outcomes: tuple[SideEffectOutcome, ...]

    @property
    def tasks_created(self) -> int:
        return sum(1 for o in self.task_outcomes if o.ok)

    @property
    def tasks_failed(self) -> int:
        return sum(1 for o in self.task_outcomes if not o.ok)


def materialize_lines(
    *,
    order: WorkOrder,
    priced: PricedLines,
    worker=None,
    task_status: str | None = None,
    user=None,
) -> MaterializedLines:
    service_lines = []
    by_service_id = {}
    task_outcomes = []

    for item in priced.service_lines:
        line = WorkOrderLine.objects.create(
            order=order,
            service=item.service,
            quantity=item.quantity,
            unit_price=item.unit_price,
            discount=item.discount,
            total=item.total,
            min_minutes=item.min_minutes,
            max_minutes=item.max_minutes,
        )
        service_lines.append(line)
        by_service_id.setdefault(item.item_id, line)

        task_outcomes.append(
            best_effort(
                "task_creation",
                create_task_for_line,
                line=line,
                worker=worker,
                status=task_status,
            )
        )

    product_lines = []
    reservation_ids = []

    for item in priced.product_lines:
        line = WorkOrderLine.objects.create(
            order=order,
            product=item.product,
            warehouse_id=item.warehouse_id,
            location_id=item.location_id,
            service_line=by_service_id.get(item.service_ref) if item.service_ref else None,
            quantity=item.quantity,
            unit_price=item.unit_price,
            discount=item.discount,
            total=item.total,
        )
        product_lines.append(line)

        reservation = reserve_stock(
            product=item.product,
            warehouse=item.warehouse_id,
            location=item.location_id,
            quantity=item.quantity,
            order=order,
            line=line,
            reason=f"Reserva para orden {order.code}",
            metadata={
                "source": "work_order",
                "order_code": order.code,
                "warehouse_id": item.warehouse_id,
                "location_id": item.location_id,
            },
            user=user,
        )
        reservation_ids.append(reservation.id)

    return MaterializedLines(
        service_lines=tuple(service_lines),
        product_lines=tuple(product_lines),
        reservation_ids=tuple(reservation_ids),
        task_outcomes=tuple(task_outcomes),
    )
