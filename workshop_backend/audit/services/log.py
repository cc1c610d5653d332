# audit/services/log.py

from __future__ import annotations

import logging

from django.db import transaction

from audit.models import AuditLogEntry

logger = logging.getLogger("audit")


def log_event(*, user, action: str, description: str = "", table_name: str) -> AuditLogEntry:
    """Append one audit entry immediately."""
    user_id = getattr(user, "pk", user)
    entry = AuditLogEntry.objects.create(
        user_id=user_id,
        action=action,
        description=description or "",
        table_name=table_name,
    )
    logger.info(
        "audit entry recorded",
        extra={"action": action, "table_name": table_name, "user_id": user_id},
    )
    return entry


def log_event_on_commit(*, user, action: str, description: str = "", table_name: str) -> None:
    """
    Append one audit entry after the surrounding transaction commits.
    Nothing is written if the transaction rolls back.
    """
    user_id = getattr(user, "pk", user)

    def _write():
        try:
            log_event(user=user_id, action=action, description=description, table_name=table_name)
        except Exception:
            logger.warning(
                "audit entry could not be recorded",
                exc_info=True,
                extra={"action": action, "table_name": table_name, "user_id": user_id},
            )

    transaction.on_commit(_write)
