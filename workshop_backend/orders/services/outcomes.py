# orders/services/outcomes.py

"""
BEST-EFFORT SIDE EFFECTS

Some side effects of an order mutation (task auto-generation, the quick
payment register) must never fail the parent operation. They run through
best_effort(), which:

- executes the callable inside its own savepoint, so a failing side effect
  leaves no partial rows behind while the parent transaction continues
- logs the failure at WARNING with the traceback
- returns a SideEffectOutcome instead of raising

Everything else in the engine is transactional and raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from django.db import transaction

logger = logging.getLogger("orders")


@dataclass(frozen=True)
class SideEffectOutcome:
    name: str
    ok: bool
    value: Any = None
    error: str | None = None

    def as_dict(self) -> dict:
        return {"name": self.name, "ok": self.ok, "error": self.error}


def best_effort(name: str, fn: Callable, *args, **kwargs) -> SideEffectOutcome:
    try:
        with transaction.atomic():
            value = fn(*args, **kwargs)
    except Exception as exc:
        logger.warning(
            "best-effort side effect failed: %s",
            name,
            exc_info=True,
            extra={"side_effect": name},
        )
        return SideEffectOutcome(name=name, ok=False, error=str(exc))

    return SideEffectOutcome(name=name, ok=True, value=value)
