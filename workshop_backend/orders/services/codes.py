# orders/services/codes.py

"""
ORDER CODE ALLOCATION

Format: ORD-<year>-<sequence>, sequence zero-padded to 3 digits.

The candidate is derived from the highest sequence already used in the
year. Two concurrent creates may compute the same candidate; the unique
constraint on WorkOrder.code decides the winner and the loser retries
with a fresh candidate, up to WORK_ORDER_CODE_MAX_ATTEMPTS times.
"""

from __future__ import annotations

import logging
from typing import Callable

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from orders.models import WorkOrder
from orders.services.exceptions import CodeAllocationError

logger = logging.getLogger("orders")

CODE_PREFIX = "ORD"


def _parse_sequence(code: str) -> int:
    try:
        return int(code.rsplit("-", 1)[1])
    except (IndexError, ValueError):
        return 0


def next_order_code(*, year: int | None = None) -> str:
    year = year or timezone.now().year
    prefix = f"{CODE_PREFIX}-{year}-"

    codes = WorkOrder.objects.filter(code__startswith=prefix).values_list("code", flat=True)
    last = max((_parse_sequence(c) for c in codes), default=0)

    return f"{prefix}{last + 1:03d}"


def max_code_attempts() -> int:
    return max(int(getattr(settings, "WORK_ORDER_CODE_MAX_ATTEMPTS", 3)), 1)


def with_unique_code(
    insert: Callable[[str], WorkOrder],
    *,
    max_attempts: int | None = None,
    candidate: Callable[[], str] = next_order_code,
) -> WorkOrder:
    """
    Bounded retry around "generate candidate -> attempt insert".

    Only a conflict on the code itself is retried; any other integrity
    error propagates unchanged.
    """
    attempts = max_attempts or max_code_attempts()

    for attempt in range(1, attempts + 1):
        code = candidate()
        try:
            with transaction.atomic():
                return insert(code)
        except IntegrityError:
            if not WorkOrder.objects.filter(code=code).exists():
                raise
            logger.warning(
                "order code conflict, retrying",
                extra={"code": code, "attempt": attempt, "max_attempts": attempts},
            )

    raise CodeAllocationError(
        f"Could not allocate a unique order code after {attempts} attempts",
        details={"attempts": attempts},
    )
