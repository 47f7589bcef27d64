# jobs/management/commands/send_daily_sales_summary.py

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from django.core.management.base import BaseCommand, CommandError
from django.db.models import Count, Sum
from django.utils import timezone

from jobs.services.queue import enqueue_notification
from jobs.services.whatsapp import format_whatsapp_number
from sales.models import Order
from sales.services.fees import format_rupiah
from store.models import Store

logger = logging.getLogger(__name__)

DAY_NAMES = ["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu"]
MONTH_NAMES = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]


def format_local_date(day) -> str:
    """2026-10-17 -> "Sabtu, 17 Oktober 2026"."""
    return f"{DAY_NAMES[day.weekday()]}, {day.day} {MONTH_NAMES[day.month - 1]} {day.year}"


def day_bounds(day):
    """Timezone-aware [start, end) for a local calendar day."""
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime.combine(day, datetime.min.time()), tz)
    return start, start + timedelta(days=1)


def summary_message(*, store_name, admin_name, day, revenue, count) -> str:
    return (
        "*Ringkasan Harian Chika POS*\n"
        f"*{store_name}* - {format_local_date(day)}\n\n"
        f"Halo *{admin_name}*, berikut adalah ringkasan penjualan Anda kemarin:\n"
        f"- *Total Omset*: {format_rupiah(revenue)}\n"
        f"- *Jumlah Transaksi*: {count}\n\n"
        "Terus pantau dan optimalkan performa penjualan Anda melalui dasbor Chika.\n\n"
        "_Apabila tidak berkenan, fitur ini dapat dinonaktifkan di menu Pengaturan._"
    )


class Command(BaseCommand):
    help = "Enqueue the previous local day's sales summary for every store admin."

    def add_arguments(self, parser):
        parser.add_argument("--date", dest="date", help="Day to summarise, YYYY-MM-DD (default: yesterday)")

    def handle(self, *args, **options):
        raw = options.get("date")
        if raw:
            try:
                day = datetime.strptime(raw, "%Y-%m-%d").date()
            except ValueError:
                raise CommandError("Invalid --date. Use YYYY-MM-DD")
        else:
            day = timezone.localdate() - timedelta(days=1)

        start, end = day_bounds(day)
        queued = 0

        for store in Store.objects.filter(daily_summary_enabled=True).prefetch_related("admins__staff_profile"):
            admins = list(store.admins.all())
            if not admins:
                logger.warning("Store has no admins", extra={"store_id": str(store.pk)})
                continue

            totals = (
                Order.objects.filter(store=store, created_at__gte=start, created_at__lt=end)
                .exclude(status=Order.STATUS_CANCELLED)
                .aggregate(revenue=Sum("total_amount"), count=Count("pk"))
            )
            revenue = totals["revenue"] or 0
            count = totals["count"] or 0

            for admin in admins:
                profile = getattr(admin, "staff_profile", None)
                if profile is None or not profile.whatsapp:
                    continue
                enqueue_notification(
                    format_whatsapp_number(profile.whatsapp),
                    summary_message(
                        store_name=store.name,
                        admin_name=profile.name or admin.display_name,
                        day=day,
                        revenue=revenue,
                        count=count,
                    ),
                    storeId=str(store.pk),
                )
                queued += 1

        logger.info("Daily sales summaries queued", extra={"day": day.isoformat(), "count": queued})
        self.stdout.write(self.style.SUCCESS(f"Queued {queued} summaries for {day.isoformat()}."))
