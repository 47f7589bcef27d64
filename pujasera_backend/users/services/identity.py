# users/services/identity.py

"""
IDENTITY PROVIDER

Creates and deletes authentication identities for the registration jobs.

- Passwords arrive already hashed (make_password at the HTTP edge); the raw
  password never enters the queue.
- delete_identity is the compensation step of a failed registration.
"""

from __future__ import annotations

from dataclasses import dataclass

from django.db import IntegrityError, transaction

from jobs.exceptions import JobError, JobValidationError
from users.models import User


class IdentityError(JobError):
    pass


class IdentityAlreadyExists(IdentityError, JobValidationError):
    pass


@dataclass(frozen=True)
class Identity:
    uid: str
    email: str
    display_name: str


class DjangoIdentityProvider:
    def create_identity(self, *, email: str, display_name: str, password_hash: str = "",
                        role: str = User.ROLE_CASHIER) -> Identity:
        email = User.objects.normalize_email((email or "").strip())
        if User.objects.filter(email__iexact=email).exists():
            raise IdentityAlreadyExists(f"Email {email} sudah terdaftar.")

        user = User(email=email, display_name=display_name or "", role=role)
        if password_hash:
            user.password = password_hash
        else:
            user.set_unusable_password()

        try:
            with transaction.atomic():
                user.save(force_insert=True)
        except IntegrityError:
            raise IdentityAlreadyExists(f"Email {email} sudah terdaftar.")

        return Identity(uid=str(user.pk), email=user.email, display_name=user.display_name)

    def delete_identity(self, uid) -> None:
        deleted, _ = User.objects.filter(pk=uid).delete()
        if not deleted:
            raise IdentityError(f"Identity {uid} not found")

    def get_user(self, uid) -> User:
        return User.objects.get(pk=uid)
