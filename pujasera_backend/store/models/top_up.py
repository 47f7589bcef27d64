# store/models/top_up.py

import uuid

from django.conf import settings
from django.db import models


class TopUpRequest(models.Model):
    """
    Token top-up request submitted by a store admin and approved by the
    platform. Approval credits tokens_to_add through the token ledger.
    """

    STATUS_PENDING = "pending"
    STATUS_COMPLETED = "completed"
    STATUS_REJECTED = "rejected"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_REJECTED, "Rejected"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    store = models.ForeignKey("store.Store", on_delete=models.CASCADE, related_name="top_up_requests")
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="top_up_requests",
    )

    amount = models.DecimalField(max_digits=14, decimal_places=2)
    tokens_to_add = models.DecimalField(max_digits=18, decimal_places=6)
    unique_code = models.PositiveIntegerField(default=0)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2)
    proof_url = models.URLField(blank=True, default="")

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)

    requested_at = models.DateTimeField(auto_now_add=True)
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-requested_at"]
        indexes = [
            models.Index(fields=["status", "requested_at"], name="store_topup_status_idx"),
        ]

    def __str__(self):
        return f"TopUp {self.store_id} {self.tokens_to_add} [{self.status}]"
