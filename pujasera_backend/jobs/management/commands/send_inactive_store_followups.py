# jobs/management/commands/send_inactive_store_followups.py

from __future__ import annotations

import logging
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db.models import Exists, OuterRef, Q
from django.utils import timezone

from jobs.services.queue import enqueue_notification
from jobs.services.whatsapp import format_whatsapp_number
from sales.models import Order
from store.models import Store

logger = logging.getLogger(__name__)

INACTIVITY_DAYS = 7


def followup_message(*, store_name, admin_name) -> str:
    return (
        f"Halo *{admin_name}*,\n\n"
        f"Kami perhatikan toko *{store_name}* belum mencatat transaksi selama "
        f"{INACTIVITY_DAYS} hari terakhir. Ada yang bisa kami bantu?\n\n"
        "Balas pesan ini jika Anda membutuhkan bantuan menggunakan Chika POS."
    )


class Command(BaseCommand):
    help = f"Enqueue a follow-up for stores with no orders in the last {INACTIVITY_DAYS} days."

    def handle(self, *args, **options):
        now = timezone.now()
        cutoff = now - timedelta(days=INACTIVITY_DAYS)

        recent_orders = Order.objects.filter(store=OuterRef("pk"), created_at__gte=cutoff)
        stores = (
            Store.objects.annotate(has_recent=Exists(recent_orders))
            .filter(has_recent=False, created_at__lt=cutoff)
            .filter(Q(last_inactivity_followup_at__isnull=True) | Q(last_inactivity_followup_at__lt=cutoff))
            .prefetch_related("admins__staff_profile")
        )

        queued = 0
        for store in stores:
            for admin in store.admins.all():
                profile = getattr(admin, "staff_profile", None)
                if profile is None or not profile.whatsapp:
                    continue
                enqueue_notification(
                    format_whatsapp_number(profile.whatsapp),
                    followup_message(store_name=store.name, admin_name=profile.name or admin.display_name),
                    storeId=str(store.pk),
                )
                queued += 1

            Store.objects.filter(pk=store.pk).update(last_inactivity_followup_at=now)

        logger.info("Inactive store follow-ups queued", extra={"count": queued})
        self.stdout.write(self.style.SUCCESS(f"Queued {queued} follow-ups."))
