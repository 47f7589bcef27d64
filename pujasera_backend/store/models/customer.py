# store/models/customer.py

import uuid

from django.db import models
from django.db.models import Q


class Customer(models.Model):
    """
    Customer loyalty record.

    Scoped to the hub store of a pujasera group (shared by all tenants)
    or to a standalone store.
    """

    TIER_BRONZE = "bronze"
    TIER_SILVER = "silver"
    TIER_GOLD = "gold"

    TIER_CHOICES = [
        (TIER_BRONZE, "Bronze"),
        (TIER_SILVER, "Silver"),
        (TIER_GOLD, "Gold"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    store = models.ForeignKey("store.Store", on_delete=models.CASCADE, related_name="customers")

    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32, blank=True, default="")

    loyalty_points = models.PositiveIntegerField(default=0)
    member_tier = models.CharField(max_length=16, choices=TIER_CHOICES, default=TIER_BRONZE)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=Q(loyalty_points__gte=0),
                name="customer_loyalty_points_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.loyalty_points} pts)"
