# jobs/tests/test_api.py

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from jobs.models import QueueEntry
from sales.tests.fixtures import PujaseraFixtureMixin
from store.models import Store
from users.models import StaffProfile

User = get_user_model()


class JobsApiTests(PujaseraFixtureMixin, TestCase):
    def setUp(self):
        self.make_pujasera()
        self.client = APIClient()

        self.cashier = User.objects.create_user(email="kasir@example.com", password="pass", role="cashier")
        StaffProfile.objects.create(user=self.cashier, name="Kasir", store=self.hub)

        self.admin = User.objects.create_user(email="hub@example.com", password="pass", role="pujasera_admin")
        self.hub.admins.add(self.admin)

    def test_cashier_enqueues_order(self):
        self.client.force_authenticate(self.cashier)
        res = self.client.post("/api/jobs/", {"type": "order-create", "payload": self.order_payload()}, format="json")

        self.assertEqual(res.status_code, 202, res.data)
        self.assertEqual(res.data["status"], "pending")
        entry = QueueEntry.objects.get(pk=res.data["id"])
        self.assertEqual(entry.type, "order-create")

    def test_order_for_foreign_store_is_forbidden(self):
        elsewhere = Store.objects.create(name="Elsewhere")
        self.client.force_authenticate(self.cashier)
        res = self.client.post(
            "/api/jobs/",
            {"type": "order-create", "payload": self.order_payload(pujaseraId=str(elsewhere.pk))},
            format="json",
        )
        self.assertEqual(res.status_code, 403)
        self.assertFalse(QueueEntry.objects.exists())

    def test_invalid_order_payload_is_rejected(self):
        self.client.force_authenticate(self.cashier)
        res = self.client.post(
            "/api/jobs/",
            {"type": "order-create", "payload": {"pujaseraId": str(self.hub.pk)}},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "VALIDATION_ERROR")

    def test_registration_jobs_cannot_be_enqueued_directly(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post("/api/jobs/", {"type": "tenant-registration", "payload": {}}, format="json")
        self.assertEqual(res.status_code, 400)

    def test_only_admins_send_notifications(self):
        body = {"type": "notification-send", "payload": {"to": "628123", "message": "Halo"}}

        self.client.force_authenticate(self.cashier)
        self.assertEqual(self.client.post("/api/jobs/", body, format="json").status_code, 403)

        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.post("/api/jobs/", body, format="json").status_code, 202)

    def test_poll_entry_status(self):
        entry = QueueEntry.objects.create(type="notification-send", payload={"to": "x", "message": "y"})
        self.client.force_authenticate(self.cashier)

        res = self.client.get(f"/api/jobs/{entry.pk}/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["status"], "pending")

    def test_anonymous_is_rejected(self):
        res = self.client.post("/api/jobs/", {"type": "order-create", "payload": {}}, format="json")
        self.assertEqual(res.status_code, 401)
