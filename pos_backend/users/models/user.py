"""
PATH: users/models/user.py

CUSTOM USER MODEL

Identity:
- email is canonical (USERNAME_FIELD).
- username is what cashiers type at the till; it is also the cashier
  session key (cashier_session:<username>).
- Login accepts EITHER username OR email (see users/auth_backends.py).

Role:
- user    -> shopper; may place orders, never lists or updates them
- cashier -> POS operator; lists orders, moves order status
- admin   -> back office; force-logout, audit trail
"""

from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import models

from permissions.roles import Role


# ---------------- USER MANAGER ----------------
class UserManager(BaseUserManager):
    def _unique_username(self, base: str) -> str:
        base = (base or "user").strip().lower()
        candidate = base
        n = 1
        while self.model.objects.filter(username__iexact=candidate).exists():
            n += 1
            candidate = f"{base}{n}"
        return candidate

    def create_user(self, email=None, password=None, **extra_fields):
        """
        Accepts any of:
        - create_user(email="a@b.com", password="x", username="ana")
        - create_user(username="till1", password="x")  -> email till1@local.test
        - create_user(email="a@b.com", password="x")   -> username derived from email
        """
        username = (extra_fields.pop("username", None) or "").strip()
        email = (email or extra_fields.pop("email", None) or "").strip()

        if not email and not username:
            raise ValueError("Provide at least email or username")

        if not email:
            email = f"{username.lower()}@local.test"
        email = self.normalize_email(email)

        if not username:
            username = self._unique_username(email.split("@")[0])

        extra_fields.setdefault("is_active", True)
        extra_fields.setdefault("role", Role.USER)

        user = self.model(email=email, username=username, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.full_clean()
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("Superuser must have an email")
        if not password:
            raise ValueError("Superuser must have a password")

        extra_fields.setdefault("role", Role.ADMIN)
        extra_fields["is_staff"] = True
        extra_fields["is_superuser"] = True

        return self.create_user(email=email, password=password, **extra_fields)


# ---------------- USER MODEL ----------------
class User(AbstractBaseUser, PermissionsMixin):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    username = models.CharField(max_length=150, unique=True)
    email = models.EmailField(unique=True)

    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)

    role = models.CharField(max_length=20, choices=Role.choices, default=Role.USER)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ["-created_at"]

    def clean(self):
        if self.email:
            self.email = self.__class__.objects.normalize_email(self.email).strip()
        self.username = (self.username or "").strip()
        if not self.username:
            raise ValidationError({"username": "Username is required"})

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.username

    def __str__(self):
        return f"{self.username} ({self.role})"
