# jobs/services/queue.py

"""
QUEUE PRODUCERS

The only way application code creates queue entries. Dispatch happens after
the surrounding transaction commits (see jobs.signals).
"""

from __future__ import annotations

from jobs.models import JobType, QueueEntry


def enqueue(job_type, payload: dict) -> QueueEntry:
    job_type = JobType(job_type)
    return QueueEntry.objects.create(type=job_type.value, payload=dict(payload or {}))


def enqueue_notification(to: str, message: str, *, is_group: bool = False, **extra) -> QueueEntry:
    payload = {"to": to, "message": message, "isGroup": bool(is_group)}
    payload.update(extra)
    return enqueue(JobType.NOTIFICATION_SEND, payload)


def enqueue_admin_group_notification(message: str) -> QueueEntry:
    return enqueue_notification("admin_group", message, is_group=True)
