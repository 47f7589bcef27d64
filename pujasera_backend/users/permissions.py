# users/permissions.py

from django.db.models import Q
from rest_framework.permissions import BasePermission

from store.models import Store


# ---------------- BASE ROLE PERMISSION ----------------
class HasRole(BasePermission):
    """
    Base permission to check user role safely.
    """

    allowed_roles = set()

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return user.is_superuser or user.role in self.allowed_roles


# ---------------- ROLE PERMISSIONS ----------------
class IsPujaseraAdmin(HasRole):
    allowed_roles = {"pujasera_admin"}


class IsStoreAdmin(HasRole):
    """Hub or tenant admin."""

    allowed_roles = {"pujasera_admin", "admin"}


class IsStaff(HasRole):
    allowed_roles = {"pujasera_admin", "admin", "cashier"}


class IsPlatformAdmin(BasePermission):
    """Platform operators (top-up approval, queue inspection)."""

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and (user.is_staff or user.is_superuser))


# ---------------- STORE SCOPE ----------------
def stores_for_user(user):
    """
    Stores a user may operate on: the ones they administer, the one their
    staff profile belongs to, and every tenant of a hub they administer.
    """
    if user.is_superuser:
        return Store.objects.all()

    direct = Q(admins=user) | Q(staff_profiles__user=user)
    hub_slugs = (
        Store.objects.filter(direct, kind=Store.KIND_HUB)
        .exclude(pujasera_group_slug="")
        .values_list("pujasera_group_slug", flat=True)
    )
    return Store.objects.filter(direct | Q(pujasera_group_slug__in=list(hub_slugs))).distinct()
