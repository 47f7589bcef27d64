# store/models/store.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q


class Store(models.Model):
    """
    Financial and identity record for one store.

    - A hub owns the shared infrastructure of a pujasera (tables, catalog).
    - Tenants share the hub's pujasera_group_slug and run their own stock,
      receipt sequence and token balance.
    - token_balance and transaction_counter are only mutated through
      store.services.token_ledger and store.services.receipt_sequencer.
    """

    KIND_HUB = "hub"
    KIND_TENANT = "tenant"
    KIND_STANDALONE = "standalone"

    KIND_CHOICES = [
        (KIND_HUB, "Pujasera hub"),
        (KIND_TENANT, "Pujasera tenant"),
        (KIND_STANDALONE, "Standalone store"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    location = models.CharField(max_length=255, blank=True, default="")
    kind = models.CharField(max_length=16, choices=KIND_CHOICES, default=KIND_STANDALONE)

    pujasera_group_slug = models.SlugField(max_length=120, blank=True, default="", db_index=True)
    pujasera_name = models.CharField(max_length=255, blank=True, default="")
    catalog_slug = models.SlugField(max_length=120, null=True, blank=True)

    token_balance = models.DecimalField(
        max_digits=18,
        decimal_places=6,
        default=Decimal("0"),
        help_text="Prepaid platform tokens (Pradana Token).",
    )
    transaction_counter = models.PositiveIntegerField(default=0)
    first_transaction_at = models.DateTimeField(null=True, blank=True)

    admins = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="administered_stores",
        blank=True,
    )

    referral_code = models.CharField(max_length=64, blank=True, default="")
    is_pos_enabled = models.BooleanField(default=True)
    daily_summary_enabled = models.BooleanField(default=True)
    last_inactivity_followup_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["catalog_slug"],
                condition=Q(catalog_slug__isnull=False) & ~Q(catalog_slug=""),
                name="uniq_store_catalog_slug_when_present",
            ),
            models.CheckConstraint(
                condition=Q(token_balance__gte=0),
                name="store_token_balance_non_negative",
            ),
        ]

    @property
    def is_hub(self) -> bool:
        return self.kind == self.KIND_HUB

    def __str__(self):
        return self.name
