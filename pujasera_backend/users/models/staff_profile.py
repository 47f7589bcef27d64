"""
PATH: users/models/staff_profile.py

STAFF PROFILE

The per-user business record written together with the store during
registration: display name, WhatsApp number, owning store and pujasera group.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models


class StaffProfile(models.Model):
    STATUS_ACTIVE = "active"
    STATUS_INACTIVE = "inactive"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_INACTIVE, "Inactive"),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="staff_profile",
    )
    name = models.CharField(max_length=150)
    whatsapp = models.CharField(max_length=32, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    store = models.ForeignKey(
        "store.Store",
        on_delete=models.PROTECT,
        related_name="staff_profiles",
    )
    pujasera_group_slug = models.SlugField(max_length=120, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    @property
    def role(self) -> str:
        return self.user.role

    def __str__(self):
        return f"{self.name} @ {self.store_id}"
