# orders/services/progress.py

"""
PROGRESS AGGREGATOR (read-only)

percentage = round(100 * (completed + verified) / total tasks)
Zero tasks means zero progress, never NaN.
"""

from __future__ import annotations

from django.db.models import Count, Q

from orders.models import Task

Status = Task.Status


def empty_progress() -> dict:
    return {
        "total": 0,
        "pending": 0,
        "in_progress": 0,
        "completed": 0,
        "verified": 0,
        "percentage": 0,
    }


def compute_progress(order) -> dict:
    order_id = getattr(order, "pk", order)

    counts = Task.objects.filter(line__order_id=order_id).aggregate(
        total=Count("id"),
        pending=Count("id", filter=Q(status=Status.PENDING)),
        in_progress=Count("id", filter=Q(status=Status.IN_PROGRESS)),
        completed=Count("id", filter=Q(status=Status.COMPLETED)),
        verified=Count("id", filter=Q(status=Status.VERIFIED)),
    )

    total = counts["total"] or 0
    if total == 0:
        return empty_progress()

    done = (counts["completed"] or 0) + (counts["verified"] or 0)
    # half-up, not banker's rounding
    percentage = int((done * 100 * 2 + total) // (2 * total))

    return {
        "total": total,
        "pending": counts["pending"] or 0,
        "in_progress": counts["in_progress"] or 0,
        "completed": counts["completed"] or 0,
        "verified": counts["verified"] or 0,
        "percentage": percentage,
    }
