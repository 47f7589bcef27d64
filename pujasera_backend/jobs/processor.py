# jobs/processor.py

"""
JOB QUEUE PROCESSOR

process_queue_entry(entry_id) drives one queue entry to a terminal status.

Rules:
- Only pending entries are processed (redelivery of a terminal entry is a no-op).
- Unknown types are recorded as unknown_type; no handler runs.
- Database handlers run inside a savepoint under the entry lock: on failure
  their writes are discarded and the entry is marked failed.
- notification-send runs with no transaction open; its outcome is written
  afterwards unless another worker finished the entry meanwhile (at-least-once).
- The dispatch table covers every JobType (checked at import).
"""

from __future__ import annotations

import logging

from django.core.exceptions import ImproperlyConfigured
from django.db import transaction
from django.utils import timezone

from jobs.context import JobContext
from jobs.handlers import (
    handle_notification_send,
    handle_order_create,
    handle_pujasera_registration,
    handle_tenant_registration,
)
from jobs.models import JobType, QueueEntry

logger = logging.getLogger(__name__)


HANDLERS = {
    JobType.ORDER_CREATE.value: handle_order_create,
    JobType.NOTIFICATION_SEND.value: handle_notification_send,
    JobType.TENANT_REGISTRATION.value: handle_tenant_registration,
    JobType.PUJASERA_REGISTRATION.value: handle_pujasera_registration,
}

_missing = set(JobType.values) - set(HANDLERS)
if _missing:
    raise ImproperlyConfigured(f"No queue handler registered for: {sorted(_missing)}")

SUCCESS_STATUS = {
    JobType.NOTIFICATION_SEND.value: QueueEntry.STATUS_SENT,
}

# Handlers that only talk to an external service. They run with no
# transaction open, so no row lock is held across the network call.
OUTSIDE_TRANSACTION = {JobType.NOTIFICATION_SEND.value}


def _locked_entry(entry_id) -> QueueEntry | None:
    return QueueEntry.objects.select_for_update().filter(pk=entry_id).first()


def _finish(entry: QueueEntry, status: str, error: str = "") -> None:
    entry.status = status
    entry.error = error
    entry.processed_at = timezone.now()
    entry.save(update_fields=["status", "error", "processed_at"])


def _run_handler(entry: QueueEntry, handler, context: JobContext, *, savepoint: bool) -> str:
    """Returns the failure message, or "" on success."""
    try:
        if savepoint:
            with transaction.atomic():
                handler(entry, context)
        else:
            handler(entry, context)
    except Exception as exc:
        logger.exception(
            "Queue entry failed",
            extra={"entry_id": str(entry.pk), "job_type": entry.type},
        )
        return str(exc) or exc.__class__.__name__
    return ""


def _record_outcome(entry: QueueEntry, error: str) -> QueueEntry:
    if error:
        _finish(entry, QueueEntry.STATUS_FAILED, error)
        return entry

    status = SUCCESS_STATUS.get(entry.type, QueueEntry.STATUS_COMPLETED)
    _finish(entry, status)
    logger.info(
        "Queue entry processed",
        extra={"entry_id": str(entry.pk), "job_type": entry.type, "status": status},
    )
    return entry


def process_queue_entry(entry_id, context: JobContext | None = None) -> QueueEntry | None:
    """
    Returns the entry in its final state, or None if it no longer exists.

    Database handlers run under the entry lock, in a savepoint. External
    handlers run after the claim transaction has closed; their outcome is
    written in a second short transaction, only if the entry is still pending.
    """
    with transaction.atomic():
        entry = _locked_entry(entry_id)
        if entry is None:
            logger.warning("Queue entry not found", extra={"entry_id": str(entry_id)})
            return None

        if entry.status != QueueEntry.STATUS_PENDING:
            logger.info(
                "Queue entry already processed; skipping",
                extra={"entry_id": str(entry.pk), "status": entry.status},
            )
            return entry

        handler = HANDLERS.get(entry.type)
        if handler is None:
            logger.warning(
                "Unknown job type",
                extra={"entry_id": str(entry.pk), "job_type": entry.type},
            )
            _finish(entry, QueueEntry.STATUS_UNKNOWN_TYPE, f"Unknown job type: {entry.type}")
            return entry

        context = context or JobContext.load()
        logger.info("Dispatching queue entry", extra={"entry_id": str(entry.pk), "job_type": entry.type})

        if entry.type not in OUTSIDE_TRANSACTION:
            error = _run_handler(entry, handler, context, savepoint=True)
            return _record_outcome(entry, error)

    error = _run_handler(entry, handler, context, savepoint=False)

    with transaction.atomic():
        current = _locked_entry(entry.pk)
        if current is None:
            logger.warning("Queue entry removed while sending", extra={"entry_id": str(entry.pk)})
            return None
        if current.status != QueueEntry.STATUS_PENDING:
            logger.warning(
                "Queue entry finished by another worker; keeping its status",
                extra={"entry_id": str(current.pk), "status": current.status},
            )
            return current
        return _record_outcome(current, error)


def process_pending(limit: int | None = None, context: JobContext | None = None) -> list[QueueEntry]:
    """Re-drive pending entries oldest first."""
    ids = QueueEntry.objects.filter(status=QueueEntry.STATUS_PENDING).values_list("pk", flat=True)
    if limit:
        ids = ids[:limit]
    context = context or JobContext.load()
    processed = []
    for entry_id in list(ids):
        entry = process_queue_entry(entry_id, context=context)
        if entry is not None:
            processed.append(entry)
    return processed
