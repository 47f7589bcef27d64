# jobs/management/commands/process_queue.py

from django.core.management.base import BaseCommand

from jobs.models import QueueEntry
from jobs.processor import process_pending


class Command(BaseCommand):
    help = "Process pending queue entries (manual replay / cron fallback)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--limit",
            type=int,
            default=0,
            help="Maximum number of entries to process (0 = all pending).",
        )

    def handle(self, *args, **options):
        limit = options.get("limit") or None
        entries = process_pending(limit=limit)

        failed = [e for e in entries if e.status in (QueueEntry.STATUS_FAILED, QueueEntry.STATUS_UNKNOWN_TYPE)]
        for entry in failed:
            self.stderr.write(self.style.WARNING(f"{entry.id} {entry.type}: {entry.status} ({entry.error})"))

        self.stdout.write(
            self.style.SUCCESS(f"Processed {len(entries)} entries ({len(failed)} failed).")
        )
