# users/management/commands/seed_users.py

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from permissions.roles import ROLE_ADMIN, ROLE_CASHIER, ROLE_USER
from pos.services.sessions import get_or_create_cashier


@dataclass(frozen=True)
class SeedUserSpec:
    label: str
    role: str
    email: str
    username: str
    first_name: str = ""
    last_name: str = ""


SEED_USERS = [
    SeedUserSpec("Admin", ROLE_ADMIN, "admin@example.com", "admin", "System", "Admin"),
    SeedUserSpec("Cashier", ROLE_CASHIER, "cashier@example.com", "cashier1", "Front", "Desk"),
    SeedUserSpec("Shopper", ROLE_USER, "shopper@example.com", "shopper", "Demo", "Shopper"),
]


class Command(BaseCommand):
    help = "Seed one admin, one cashier (with POS profile) and one shopper."

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            type=str,
            default="Pass1234!",
            help="Password for seeded users (default: Pass1234!)",
        )
        parser.add_argument(
            "--force-password",
            action="store_true",
            help="Reset password for existing seeded users too.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        password = options.get("password") or ""
        force_password = bool(options.get("force_password"))

        if not password or len(password) < 6:
            raise CommandError("--password must be at least 6 characters.")

        User = get_user_model()

        created_count = 0
        updated_count = 0

        for seed in SEED_USERS:
            is_admin = seed.role == ROLE_ADMIN

            user = User.objects.filter(email__iexact=seed.email).first()
            created = user is None
            if created:
                user = User.objects.create_user(
                    email=seed.email,
                    password=password,
                    username=seed.username,
                    first_name=seed.first_name,
                    last_name=seed.last_name,
                    role=seed.role,
                    is_staff=is_admin,
                    is_superuser=is_admin,
                )
                created_count += 1
            else:
                # keep aligned with the seed list
                user.role = seed.role
                user.is_staff = is_admin
                user.is_superuser = is_admin
                user.is_active = True
                if force_password:
                    user.set_password(password)
                user.save()
                updated_count += 1

            if seed.role == ROLE_CASHIER:
                get_or_create_cashier(user)

            verb = "created" if created else "exists "
            self.stdout.write(f"{verb}: {seed.label} ({seed.role}) -> {user.username} / {seed.email}")

        self.stdout.write("\n--- Summary ---")
        self.stdout.write(f"Created: {created_count}")
        self.stdout.write(f"Updated: {updated_count}")
