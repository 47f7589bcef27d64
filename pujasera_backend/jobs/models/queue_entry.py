# jobs/models/queue_entry.py

"""
QUEUE ENTRY

A unit of deferred work.

Rules:
- Created by a producer with status=pending; payload is immutable after create.
- Mutated exactly once by jobs.processor to a terminal status.
- Never deleted by the application (retention is an operator concern).
"""

import uuid

from django.db import models


class JobType(models.TextChoices):
    ORDER_CREATE = "order-create", "Order create"
    NOTIFICATION_SEND = "notification-send", "Notification send"
    TENANT_REGISTRATION = "tenant-registration", "Tenant registration"
    PUJASERA_REGISTRATION = "pujasera-registration", "Pujasera registration"


class QueueEntry(models.Model):
    STATUS_PENDING = "pending"
    STATUS_COMPLETED = "completed"
    STATUS_SENT = "sent"
    STATUS_FAILED = "failed"
    STATUS_UNKNOWN_TYPE = "unknown_type"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_SENT, "Sent"),
        (STATUS_FAILED, "Failed"),
        (STATUS_UNKNOWN_TYPE, "Unknown type"),
    ]

    TERMINAL_STATES = {STATUS_COMPLETED, STATUS_SENT, STATUS_FAILED, STATUS_UNKNOWN_TYPE}

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Not restricted to JobType choices: unrecognised types are recorded
    # as unknown_type by the processor.
    type = models.CharField(max_length=64, db_index=True)
    payload = models.JSONField(default=dict, blank=True)

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    error = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["created_at"]
        verbose_name_plural = "Queue entries"
        indexes = [
            models.Index(fields=["status", "created_at"], name="jobs_entry_status_idx"),
        ]

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATES

    def __str__(self):
        return f"{self.type} [{self.status}] {self.id}"
