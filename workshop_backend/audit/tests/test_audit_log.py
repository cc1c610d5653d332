# audit/tests/test_audit_log.py

from unittest import mock

from django.core.exceptions import ValidationError
from django.db import transaction
from django.test import TestCase

from audit.models import AuditLogEntry
from audit.services.log import log_event, log_event_on_commit
from workshop.tests.factories import make_user


class AuditLogTests(TestCase):
    def setUp(self):
        self.user = make_user("auditor")

    def test_entries_are_immutable(self):
        entry = log_event(
            user=self.user,
            action=AuditLogEntry.Action.CREATE_ORDER,
            description="Orden creada: ORD-2026-001",
            table_name="work_order",
        )
        entry.description = "editado"
        with self.assertRaises(ValidationError):
            entry.save()
        with self.assertRaises(ValidationError):
            entry.delete()

    def test_on_commit_entry_is_written_once(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            log_event_on_commit(
                user=self.user,
                action=AuditLogEntry.Action.UPDATE_ORDER,
                description="Actualización orden ORD-2026-001: notes",
                table_name="work_order",
            )

        self.assertEqual(len(callbacks), 1)
        self.assertEqual(AuditLogEntry.objects.count(), 1)

    def test_rolled_back_transaction_writes_nothing(self):
        with self.captureOnCommitCallbacks(execute=True):
            try:
                with transaction.atomic():
                    log_event_on_commit(
                        user=self.user,
                        action=AuditLogEntry.Action.DELETE_ORDER,
                        table_name="work_order",
                    )
                    raise RuntimeError("rollback")
            except RuntimeError:
                pass

        self.assertFalse(AuditLogEntry.objects.exists())

    def test_audit_failure_is_logged_not_raised(self):
        with mock.patch("audit.services.log.log_event", side_effect=RuntimeError("db down")):
            with self.assertLogs("audit", level="WARNING"):
                with self.captureOnCommitCallbacks(execute=True):
                    log_event_on_commit(
                        user=self.user,
                        action=AuditLogEntry.Action.UPDATE_ORDER,
                        table_name="work_order",
                    )
