"""
Management command: seed_test_users
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Creates one demo account per role so the portal can be explored
locally without going through registration.

The command is **idempotent** — existing accounts (matched by national
ID) are reported and left untouched.  The demo ID numbers are not
checksum-valid, so they are inserted directly rather than through the
registration service.

Usage::

    python manage.py seed_test_users
"""

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from accounts.models import UserRole
from core.constants import DEFAULT_EMAIL_DOMAIN

User = get_user_model()

# (national_id, password, role, full_name, phone_number)
TEST_USERS: list[tuple[str, str, str, str, str]] = [
    ("1234567890123", "victim123", UserRole.VICTIM, "Test Victim", "0821234567"),
    ("9876543210987", "police123", UserRole.POLICE, "Test Police Officer", "0829876543"),
    ("1111222233334", "admin1234", UserRole.ADMIN, "Test Administrator", "0821112222"),
]


class Command(BaseCommand):
    help = (
        "Creates a demo victim, police officer and administrator.  "
        "Safe to run multiple times (idempotent)."
    )

    def handle(self, *args, **options):
        self.stdout.write(self.style.MIGRATE_HEADING(
            "\n══════════════════════════════════════════"
            "\n  Seeding Test Users"
            "\n══════════════════════════════════════════\n"
        ))

        created_count = 0
        for national_id, password, role, full_name, phone in TEST_USERS:
            if User.objects.filter(national_id=national_id).exists():
                self.stdout.write(self.style.WARNING(
                    f"  ⚠  {role:<7s} {national_id} already exists — skipped."
                ))
                continue

            with transaction.atomic():
                User.objects.create_user(
                    username=national_id,
                    password=password,
                    email=f"{national_id}@{DEFAULT_EMAIL_DOMAIN}",
                    national_id=national_id,
                    phone_number=phone,
                    full_name=full_name,
                    role=role,
                    is_staff=role == UserRole.ADMIN,
                )
            created_count += 1
            self.stdout.write(self.style.SUCCESS(
                f"  ✔  Created {role:<7s} {national_id} / {password}"
            ))

        self.stdout.write(self.style.MIGRATE_HEADING(
            "\n──────────────────────────────────────────"
        ))
        self.stdout.write(self.style.SUCCESS(
            f"  Done!  {created_count} user(s) created.\n"
        ))
