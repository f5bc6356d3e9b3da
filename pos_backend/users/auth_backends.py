"""
PATH: users/auth_backends.py

AUTH BACKEND: Email OR Username login

Rules:
- The identifier is an email when it contains "@", otherwise a username.
- Both lookups are case-insensitive.
- Supplying email= and username= together fails authentication.

Used by the POS login view (username) and SimpleJWT token obtain
(USERNAME_FIELD = email, but a username typed there works too).
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import BaseBackend

User = get_user_model()


class EmailOrUsernameBackend(BaseBackend):
    def authenticate(self, request, username=None, password=None, **kwargs):
        email_kw = (kwargs.get("email") or "").strip()
        username = (username or "").strip()
        if email_kw and username:
            return None

        identifier = username or email_kw
        if not identifier or password is None:
            return None

        lookup = {"email__iexact": identifier} if "@" in identifier else {"username__iexact": identifier}
        user = User.objects.filter(**lookup).first()
        if user is None or not user.is_active:
            return None

        return user if user.check_password(password) else None

    def get_user(self, user_id):
        return User.objects.filter(pk=user_id).first()
