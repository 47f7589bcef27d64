# jobs/signals.py

from functools import partial

from django.conf import settings
from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from jobs.models import QueueEntry


@receiver(post_save, sender=QueueEntry, dispatch_uid="jobs_dispatch_new_entry")
def dispatch_new_entry(sender, instance, created, raw=False, **kwargs):
    if raw or not created:
        return
    if not getattr(settings, "JOBS_PROCESS_ON_COMMIT", False):
        return

    from jobs.processor import process_queue_entry

    # Runs after the producer's transaction commits; never inside it.
    transaction.on_commit(partial(process_queue_entry, instance.pk), robust=True)
