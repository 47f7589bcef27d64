# store/tests/test_top_up.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from jobs.models import QueueEntry
from store.models import Store, TopUpRequest
from store.services.top_up import (
    TopUpAlreadyProcessed,
    TopUpNotFound,
    approve_top_up,
    format_token_amount,
    reject_top_up,
    submit_top_up,
)
from users.models import StaffProfile

User = get_user_model()


class TopUpServiceTests(TestCase):
    def setUp(self):
        self.store = Store.objects.create(name="Warung Sate", kind=Store.KIND_TENANT, token_balance=Decimal("1"))
        self.admin = User.objects.create_user(email="sate@example.com", password="pass", role="admin")
        StaffProfile.objects.create(user=self.admin, name="Pak Sate", whatsapp="08123456789", store=self.store)
        self.store.admins.add(self.admin)

    def _submit(self):
        return submit_top_up(
            store=self.store,
            requested_by=self.admin,
            amount=Decimal("50000"),
            tokens_to_add=Decimal("50"),
            total_amount=Decimal("50123"),
            unique_code=123,
        )

    def test_submit_notifies_admin_group(self):
        req = self._submit()

        self.assertEqual(req.status, TopUpRequest.STATUS_PENDING)
        entry = QueueEntry.objects.get()
        self.assertEqual(entry.type, "notification-send")
        self.assertEqual(entry.payload["to"], "admin_group")
        self.assertTrue(entry.payload["isGroup"])
        self.assertIn("Warung Sate", entry.payload["message"])

    def test_approve_credits_tokens_and_notifies(self):
        req = self._submit()
        approve_top_up(req.pk)

        req.refresh_from_db()
        self.store.refresh_from_db()
        self.assertEqual(req.status, TopUpRequest.STATUS_COMPLETED)
        self.assertIsNotNone(req.processed_at)
        self.assertEqual(self.store.token_balance, Decimal("51"))

        recipients = [entry.payload["to"] for entry in QueueEntry.objects.all()]
        self.assertIn("628123456789", recipients)

    def test_reject_leaves_balance(self):
        req = self._submit()
        reject_top_up(req.pk)

        req.refresh_from_db()
        self.store.refresh_from_db()
        self.assertEqual(req.status, TopUpRequest.STATUS_REJECTED)
        self.assertEqual(self.store.token_balance, Decimal("1"))

    def test_request_is_processed_once(self):
        req = self._submit()
        approve_top_up(req.pk)
        with self.assertRaises(TopUpAlreadyProcessed):
            approve_top_up(req.pk)

    def test_unknown_request(self):
        with self.assertRaises(TopUpNotFound):
            approve_top_up("not-a-uuid")

    def test_format_token_amount(self):
        self.assertEqual(format_token_amount(Decimal("1500000")), "1.500.000")
        self.assertEqual(format_token_amount(Decimal("2.5")), "2,5")


class StoreApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.hub = Store.objects.create(name="Hub", kind=Store.KIND_HUB, pujasera_group_slug="foodcourt-abc12")
        self.other = Store.objects.create(name="Elsewhere", kind=Store.KIND_STANDALONE)

        self.admin = User.objects.create_user(email="hub@example.com", password="pass", role="pujasera_admin")
        self.hub.admins.add(self.admin)
        self.operator = User.objects.create_user(
            email="ops@example.com", password="pass", role="admin", is_staff=True
        )

    def test_create_top_up_derives_tokens(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            "/api/store/top-ups/",
            {"store": str(self.hub.pk), "amount": "50000", "unique_code": 77},
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)

        req = TopUpRequest.objects.get()
        self.assertEqual(req.tokens_to_add, Decimal("50"))
        self.assertEqual(req.total_amount, Decimal("50077"))

    def test_cannot_top_up_foreign_store(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            "/api/store/top-ups/",
            {"store": str(self.other.pk), "amount": "50000"},
            format="json",
        )
        self.assertEqual(res.status_code, 403)

    def test_only_platform_admin_approves(self):
        req = submit_top_up(
            store=self.hub,
            requested_by=self.admin,
            amount=Decimal("10000"),
            tokens_to_add=Decimal("10"),
            total_amount=Decimal("10000"),
        )

        self.client.force_authenticate(self.admin)
        res = self.client.post(f"/api/store/top-ups/{req.pk}/approve/")
        self.assertEqual(res.status_code, 403)

        self.client.force_authenticate(self.operator)
        res = self.client.post(f"/api/store/top-ups/{req.pk}/approve/")
        self.assertEqual(res.status_code, 200, res.data)
        self.hub.refresh_from_db()
        self.assertEqual(self.hub.token_balance, Decimal("10"))

    def test_table_actions(self):
        from store.models import Table

        table = Table.objects.create(store=self.hub, name="Meja 3")
        self.client.force_authenticate(self.admin)

        res = self.client.post(f"/api/store/tables/{table.pk}/reserve/")
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["status"], "reserved")

        res = self.client.post(f"/api/store/tables/{table.pk}/clean/")
        self.assertEqual(res.status_code, 400)

        res = self.client.post(f"/api/store/tables/{table.pk}/clear/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["status"], "available")

    def test_virtual_table_clear_reports_deletion(self):
        from store.models import Table

        table = Table.objects.create(store=self.hub, name="Kasir", is_virtual=True)
        self.client.force_authenticate(self.admin)

        res = self.client.post(f"/api/store/tables/{table.pk}/clear/")
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["deleted"])
        self.assertFalse(Table.objects.filter(pk=table.pk).exists())
