# store/models/table.py

import uuid

from django.db import models


class Table(models.Model):
    """
    Physical or virtual seating unit of a hub/standalone store.

    Status changes go through store.services.table_state.
    Virtual tables (counter pickup, cashier-pay catalog orders) are deleted
    instead of recycled when cleared.
    """

    STATUS_AVAILABLE = "available"
    STATUS_RESERVED = "reserved"
    STATUS_OCCUPIED = "occupied"
    STATUS_AWAITING_CLEANUP = "awaiting_cleanup"

    STATUS_CHOICES = [
        (STATUS_AVAILABLE, "Tersedia"),
        (STATUS_RESERVED, "Dipesan"),
        (STATUS_OCCUPIED, "Terisi"),
        (STATUS_AWAITING_CLEANUP, "Menunggu Dibersihkan"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    store = models.ForeignKey("store.Store", on_delete=models.CASCADE, related_name="tables")

    name = models.CharField(max_length=64)
    capacity = models.PositiveIntegerField(default=2)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_AVAILABLE)
    current_order = models.JSONField(null=True, blank=True)
    is_virtual = models.BooleanField(default=False)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} [{self.status}]"
