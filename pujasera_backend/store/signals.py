# store/signals.py

from __future__ import annotations

import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from jobs.services.queue import enqueue_admin_group_notification
from store.models import TopUpRequest
from store.services.top_up import format_token_amount

logger = logging.getLogger(__name__)


@receiver(post_save, sender=TopUpRequest, dispatch_uid="store_top_up_created")
def notify_top_up_created(sender, instance: TopUpRequest, created: bool, **kwargs):
    if not created:
        return

    requester = instance.requested_by
    requester_name = "N/A"
    if requester is not None:
        profile = getattr(requester, "staff_profile", None)
        requester_name = (profile.name if profile else "") or requester.display_name or requester.email

    enqueue_admin_group_notification(
        "*Permintaan Top-up Baru*\n\n"
        f"Toko: *{instance.store.name}*\n"
        f"Pengaju: *{requester_name}*\n"
        f"Jumlah: *{format_token_amount(instance.tokens_to_add)} token*\n\n"
        "Mohon segera verifikasi di panel admin.\n"
        f"Bukti: {instance.proof_url or 'Tidak ada'}"
    )
    logger.info("Queued top-up request notification", extra={"top_up_id": str(instance.pk)})
