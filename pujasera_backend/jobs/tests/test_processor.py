# jobs/tests/test_processor.py

from decimal import Decimal

from django.test import TestCase

from jobs.models import JobType, QueueEntry
from jobs.processor import HANDLERS, process_pending, process_queue_entry
from jobs.services.queue import enqueue
from jobs.tests.fixtures import make_context
from sales.models import Order
from sales.tests.fixtures import PujaseraFixtureMixin
from store.models import Store


class ProcessorTests(PujaseraFixtureMixin, TestCase):
    """
    GUARANTEES:
    - Every entry ends in exactly one terminal status
    - Redelivery never duplicates work
    - A failed handler leaves no partial writes
    """

    def setUp(self):
        self.make_pujasera()
        self.context = make_context()

    def test_every_job_type_has_a_handler(self):
        self.assertEqual(set(HANDLERS), set(JobType.values))

    def test_order_create_entry_completes(self):
        entry = enqueue(JobType.ORDER_CREATE, self.order_payload())

        process_queue_entry(entry.pk, context=self.context)
        entry.refresh_from_db()

        self.assertEqual(entry.status, QueueEntry.STATUS_COMPLETED)
        self.assertIsNotNone(entry.processed_at)
        self.assertEqual(entry.error, "")

        order = Order.objects.get(parent__isnull=True)
        self.assertEqual(order.idempotency_key, str(entry.pk))
        self.assertEqual(order.sub_orders.count(), 2)

    def test_redelivered_entry_is_skipped(self):
        entry = enqueue(JobType.ORDER_CREATE, self.order_payload())

        process_queue_entry(entry.pk, context=self.context)
        process_queue_entry(entry.pk, context=self.context)

        self.assertEqual(Order.objects.filter(parent__isnull=True).count(), 1)
        self.hub.refresh_from_db()
        self.assertEqual(self.hub.token_balance, Decimal("9.5"))

    def test_duplicate_entries_with_same_order_id_create_one_order(self):
        payload = self.order_payload(orderId="pos-42")
        first = enqueue(JobType.ORDER_CREATE, payload)
        second = enqueue(JobType.ORDER_CREATE, payload)

        process_queue_entry(first.pk, context=self.context)
        process_queue_entry(second.pk, context=self.context)

        second.refresh_from_db()
        self.assertEqual(second.status, QueueEntry.STATUS_COMPLETED)
        self.assertEqual(Order.objects.filter(parent__isnull=True).count(), 1)
        self.assertEqual(Order.objects.filter(parent__isnull=False).count(), 2)

    def test_insufficient_balance_fails_entry_without_writes(self):
        Store.objects.filter(pk=self.hub.pk).update(token_balance=Decimal("0"))
        entry = enqueue(JobType.ORDER_CREATE, self.order_payload())

        process_queue_entry(entry.pk, context=self.context)
        entry.refresh_from_db()

        self.assertEqual(entry.status, QueueEntry.STATUS_FAILED)
        self.assertIn("tidak mencukupi", entry.error)
        self.assertFalse(Order.objects.exists())
        self.nasi.refresh_from_db()
        self.assertEqual(self.nasi.stock, 10)

    def test_invalid_payload_fails_entry(self):
        entry = enqueue(JobType.ORDER_CREATE, {"pujaseraId": str(self.hub.pk)})

        process_queue_entry(entry.pk, context=self.context)
        entry.refresh_from_db()

        self.assertEqual(entry.status, QueueEntry.STATUS_FAILED)
        self.assertIn("Data pesanan tidak lengkap", entry.error)

    def test_unknown_type_is_recorded(self):
        entry = QueueEntry.objects.create(type="whatsapp-broadcast", payload={})

        process_queue_entry(entry.pk, context=self.context)
        entry.refresh_from_db()

        self.assertEqual(entry.status, QueueEntry.STATUS_UNKNOWN_TYPE)
        self.assertEqual(entry.error, "Unknown job type: whatsapp-broadcast")

    def test_missing_entry_returns_none(self):
        self.assertIsNone(process_queue_entry("00000000-0000-0000-0000-000000000000", context=self.context))

    def test_process_pending_drains_queue(self):
        enqueue(JobType.ORDER_CREATE, self.order_payload())
        QueueEntry.objects.create(type="bogus", payload={})

        processed = process_pending(context=self.context)

        self.assertEqual(len(processed), 2)
        self.assertFalse(QueueEntry.objects.filter(status=QueueEntry.STATUS_PENDING).exists())
