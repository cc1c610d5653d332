# workshop/management/commands/seed_staff.py

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from permissions.roles import (
    ROLE_ADMIN,
    ROLE_ADVISOR,
    ROLE_MANAGER,
    ROLE_MECHANIC,
    ROLE_WAREHOUSE,
    STAFF_ROLES,
)
from workshop.models import Worker


@dataclass(frozen=True)
class SeedStaffSpec:
    label: str
    role: str
    username: str
    email: str
    is_worker: bool = False


STAFF_SPECS = [
    SeedStaffSpec("Admin", ROLE_ADMIN, "admin", "admin@example.com"),
    SeedStaffSpec("Manager", ROLE_MANAGER, "manager", "manager@example.com"),
    SeedStaffSpec("Service advisor", ROLE_ADVISOR, "advisor", "advisor@example.com"),
    SeedStaffSpec("Mechanic", ROLE_MECHANIC, "mechanic", "mechanic@example.com", is_worker=True),
    SeedStaffSpec("Warehouse", ROLE_WAREHOUSE, "warehouse", "warehouse@example.com"),
]


def _upsert_user(*, User, spec: SeedStaffSpec, password: str):
    """
    Idempotent user seed:
    - create if missing (password set only on create)
    - keep staff / superuser flags aligned
    """
    user, created = User.objects.get_or_create(
        username=spec.username,
        defaults={"email": spec.email, "is_staff": True},
    )

    is_admin = spec.role == ROLE_ADMIN
    dirty = created
    if user.is_superuser != is_admin:
        user.is_superuser = is_admin
        dirty = True
    if not user.is_staff:
        user.is_staff = True
        dirty = True
    if created:
        user.set_password(password)

    if dirty:
        user.save()
    return user, created


class Command(BaseCommand):
    help = "Seed role groups and one staff account per role (admin, manager, advisor, mechanic, warehouse)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            type=str,
            default="Pass1234!",
            help="Password for newly created users (default: Pass1234!)",
        )
        parser.add_argument(
            "--groups-only",
            action="store_true",
            help="Only create the role groups.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        password = options.get("password") or ""
        if not options.get("groups_only") and len(password) < 6:
            raise CommandError("--password must be at least 6 characters.")

        groups = {}
        for role in sorted(STAFF_ROLES):
            groups[role], created = Group.objects.get_or_create(name=role)
            if created:
                self.stdout.write(f"created group: {role}")

        if options.get("groups_only"):
            return

        User = get_user_model()
        created_count = 0

        for spec in STAFF_SPECS:
            user, created = _upsert_user(User=User, spec=spec, password=password)
            user.groups.add(groups[spec.role])

            if spec.is_worker:
                Worker.objects.get_or_create(
                    user=user,
                    defaults={"full_name": spec.label},
                )

            if created:
                created_count += 1
                self.stdout.write(f"created: {spec.label} ({spec.role})")
            else:
                self.stdout.write(f"exists:  {spec.label} ({spec.role})")

        self.stdout.write(f"\nCreated users: {created_count}")
