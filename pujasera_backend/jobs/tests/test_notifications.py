# jobs/tests/test_notifications.py

import io
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError, URLError
from urllib.parse import parse_qs

from django.db import connection
from django.test import SimpleTestCase, TestCase, TransactionTestCase

from jobs.exceptions import GatewayError, JobValidationError
from jobs.models import QueueEntry
from jobs.processor import process_queue_entry
from jobs.services.queue import enqueue_admin_group_notification, enqueue_notification
from jobs.services.whatsapp import (
    NotificationConfig,
    WhatsAppGateway,
    format_whatsapp_number,
    resolve_recipient,
)
from jobs.tests.fixtures import make_context


def _response(body=b'{"status": true}', status=200):
    resp = MagicMock()
    resp.status = status
    resp.read.return_value = body
    cm = MagicMock()
    cm.__enter__.return_value = resp
    cm.__exit__.return_value = False
    return cm


class WhatsAppHelpersTests(SimpleTestCase):
    def test_format_whatsapp_number(self):
        self.assertEqual(format_whatsapp_number("0812-3456-789"), "628123456789")
        self.assertEqual(format_whatsapp_number("812345"), "62812345")
        self.assertEqual(format_whatsapp_number("+62 812 345"), "62812345")
        self.assertEqual(format_whatsapp_number(""), "")

    def test_admin_group_alias_only_for_groups(self):
        config = NotificationConfig(device_id="d", admin_group="grp")
        self.assertEqual(resolve_recipient("admin_group", True, config), "grp")
        self.assertEqual(resolve_recipient("admin_group", False, config), "admin_group")
        self.assertEqual(resolve_recipient("6281", False, config), "6281")

    def test_missing_admin_group_is_invalid(self):
        config = NotificationConfig(device_id="d", admin_group="")
        with self.assertRaises(JobValidationError) as ctx:
            resolve_recipient("admin_group", True, config)
        self.assertIn("Recipient is invalid", str(ctx.exception))


class WhatsAppGatewayTests(SimpleTestCase):
    def setUp(self):
        self.gateway = WhatsAppGateway(
            NotificationConfig(device_id="device-1", admin_group="grp", base_url="https://wa.test/api")
        )

    @patch("jobs.services.whatsapp.urlopen")
    def test_send_to_number(self, mock_urlopen):
        mock_urlopen.return_value = _response()

        self.gateway.send("628123", "Halo")

        request = mock_urlopen.call_args[0][0]
        self.assertEqual(request.full_url, "https://wa.test/api/send")
        form = parse_qs(request.data.decode("utf-8"))
        self.assertEqual(form["device_id"], ["device-1"])
        self.assertEqual(form["number"], ["628123"])
        self.assertEqual(form["message"], ["Halo"])

    @patch("jobs.services.whatsapp.urlopen")
    def test_send_to_group(self, mock_urlopen):
        mock_urlopen.return_value = _response()

        self.gateway.send("grp", "Halo", is_group=True)

        request = mock_urlopen.call_args[0][0]
        self.assertEqual(request.full_url, "https://wa.test/api/sendGroup")
        self.assertEqual(parse_qs(request.data.decode("utf-8"))["group"], ["grp"])

    @patch("jobs.services.whatsapp.urlopen")
    def test_error_body_is_a_gateway_error(self, mock_urlopen):
        mock_urlopen.return_value = _response(b'{"status": "error", "reason": "device not connected"}')

        with self.assertRaises(GatewayError) as ctx:
            self.gateway.send("628123", "Halo")
        self.assertEqual(str(ctx.exception), "device not connected")

    @patch("jobs.services.whatsapp.urlopen")
    def test_http_error_carries_provider_reason(self, mock_urlopen):
        mock_urlopen.side_effect = HTTPError(
            "https://wa.test/api/send", 500, "Server Error", {}, io.BytesIO(b'{"reason": "quota exceeded"}')
        )

        with self.assertRaises(GatewayError) as ctx:
            self.gateway.send("628123", "Halo")
        self.assertEqual(str(ctx.exception), "quota exceeded")

    @patch("jobs.services.whatsapp.urlopen")
    def test_unreachable_provider(self, mock_urlopen):
        mock_urlopen.side_effect = URLError("timed out")
        with self.assertRaises(GatewayError):
            self.gateway.send("628123", "Halo")


class NotificationJobTests(TestCase):
    @patch("jobs.services.whatsapp.urlopen")
    def test_admin_group_message_is_sent(self, mock_urlopen):
        mock_urlopen.return_value = _response()
        entry = enqueue_admin_group_notification("Top-up baru")

        process_queue_entry(entry.pk, context=make_context(admin_group="group-1"))
        entry.refresh_from_db()

        self.assertEqual(entry.status, QueueEntry.STATUS_SENT)
        form = parse_qs(mock_urlopen.call_args[0][0].data.decode("utf-8"))
        self.assertEqual(form["group"], ["group-1"])

    @patch("jobs.services.whatsapp.urlopen")
    def test_admin_group_without_configured_group_fails(self, mock_urlopen):
        entry = enqueue_admin_group_notification("Top-up baru")

        process_queue_entry(entry.pk, context=make_context(admin_group=""))
        entry.refresh_from_db()

        self.assertEqual(entry.status, QueueEntry.STATUS_FAILED)
        self.assertIn("invalid", entry.error)
        mock_urlopen.assert_not_called()

    @patch("jobs.services.whatsapp.urlopen")
    def test_missing_device_id_fails_fast(self, mock_urlopen):
        entry = enqueue_notification("628123", "Halo")

        process_queue_entry(entry.pk, context=make_context(device_id=""))
        entry.refresh_from_db()

        self.assertEqual(entry.status, QueueEntry.STATUS_FAILED)
        mock_urlopen.assert_not_called()

    def test_missing_message_fails(self):
        entry = QueueEntry.objects.create(type="notification-send", payload={"to": "628123"})

        process_queue_entry(entry.pk, context=make_context())
        entry.refresh_from_db()

        self.assertEqual(entry.status, QueueEntry.STATUS_FAILED)
        self.assertIn("message", entry.error)

    @patch("jobs.services.whatsapp.urlopen")
    def test_gateway_rejection_fails_entry(self, mock_urlopen):
        mock_urlopen.return_value = _response(b'{"status": "error", "reason": "nomor tidak terdaftar"}')
        entry = enqueue_notification("628123", "Halo")

        process_queue_entry(entry.pk, context=make_context())
        entry.refresh_from_db()

        self.assertEqual(entry.status, QueueEntry.STATUS_FAILED)
        self.assertEqual(entry.error, "nomor tidak terdaftar")


class NotificationTransactionTests(TransactionTestCase):
    """
    GUARANTEES:
    - No database transaction is open during the gateway call
    - A status written by another worker during the call is kept
    """

    @patch("jobs.services.whatsapp.urlopen")
    def test_gateway_call_runs_without_open_transaction(self, mock_urlopen):
        seen = {}

        def send(req, timeout=None):
            seen["in_atomic_block"] = connection.in_atomic_block
            return _response()

        mock_urlopen.side_effect = send
        entry = enqueue_notification("628123", "Halo")

        process_queue_entry(entry.pk, context=make_context())
        entry.refresh_from_db()

        self.assertEqual(entry.status, QueueEntry.STATUS_SENT)
        self.assertIsNotNone(entry.processed_at)
        self.assertFalse(seen["in_atomic_block"])

    @patch("jobs.services.whatsapp.urlopen")
    def test_entry_finished_during_call_is_not_overwritten(self, mock_urlopen):
        entry = enqueue_notification("628123", "Halo")

        def send(req, timeout=None):
            QueueEntry.objects.filter(pk=entry.pk).update(status=QueueEntry.STATUS_FAILED, error="superseded")
            return _response()

        mock_urlopen.side_effect = send

        result = process_queue_entry(entry.pk, context=make_context())
        entry.refresh_from_db()

        self.assertEqual(result.status, QueueEntry.STATUS_FAILED)
        self.assertEqual(entry.status, QueueEntry.STATUS_FAILED)
        self.assertEqual(entry.error, "superseded")

    @patch("jobs.services.whatsapp.urlopen")
    def test_gateway_failure_is_recorded_after_call(self, mock_urlopen):
        mock_urlopen.return_value = _response(b'{"status": "error", "reason": "device offline"}')
        entry = enqueue_notification("628123", "Halo")

        process_queue_entry(entry.pk, context=make_context())
        entry.refresh_from_db()

        self.assertEqual(entry.status, QueueEntry.STATUS_FAILED)
        self.assertEqual(entry.error, "device offline")
