# jobs/tests/test_registration.py

from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.contrib.auth.hashers import make_password
from django.test import TestCase

from jobs.models import JobType, QueueEntry
from jobs.processor import process_queue_entry
from jobs.services.queue import enqueue
from jobs.tests.fixtures import make_context
from sales.services.fees import FeeScheduleConfig
from store.models import Store
from users.models import StaffProfile
from users.services.identity import DjangoIdentityProvider, IdentityError

User = get_user_model()


class BrokenDeleteProvider(DjangoIdentityProvider):
    def delete_identity(self, uid) -> None:
        raise IdentityError("auth backend unavailable")


class RegistrationJobTests(TestCase):
    """
    GUARANTEES:
    - Identity, store and profile are created together or not at all
    - A failed store write deletes the identity it created
    - A failed compensation is logged, the original error is reported
    """

    def setUp(self):
        self.context = make_context(
            fee_schedule=FeeScheduleConfig(
                new_pujasera_bonus_tokens=Decimal("50"),
                new_tenant_bonus_tokens=Decimal("20"),
            )
        )

    def _pujasera_payload(self, **overrides):
        payload = {
            "pujaseraName": "Pujasera Melati",
            "pujaseraLocation": "Bandung",
            "adminName": "Bu Melati",
            "email": "melati@example.com",
            "whatsapp": "081234567890",
            "passwordHash": make_password("rahasia-123"),
        }
        payload.update(overrides)
        return payload

    def _tenant_payload(self, slug, **overrides):
        payload = {
            "storeName": "Bakso Pak Kumis",
            "adminName": "Pak Kumis",
            "email": "kumis@example.com",
            "whatsapp": "0811111111",
            "passwordHash": make_password("rahasia-456"),
            "pujaseraGroupSlug": slug,
        }
        payload.update(overrides)
        return payload

    def _run(self, job_type, payload, context=None):
        entry = enqueue(job_type, payload)
        process_queue_entry(entry.pk, context=context or self.context)
        entry.refresh_from_db()
        return entry

    def _register_pujasera(self):
        entry = self._run(JobType.PUJASERA_REGISTRATION, self._pujasera_payload())
        self.assertEqual(entry.status, QueueEntry.STATUS_COMPLETED, entry.error)
        return Store.objects.get(kind=Store.KIND_HUB)

    def test_pujasera_registration_creates_hub(self):
        hub = self._register_pujasera()
        user = User.objects.get(email="melati@example.com")

        self.assertEqual(str(hub.pk), str(user.pk))
        self.assertEqual(user.role, User.ROLE_PUJASERA_ADMIN)
        self.assertTrue(user.check_password("rahasia-123"))
        self.assertTrue(hub.pujasera_group_slug.startswith("pujasera-melati-"))
        self.assertEqual(hub.catalog_slug, hub.pujasera_group_slug)
        self.assertEqual(hub.token_balance, Decimal("50"))
        self.assertIn(user, hub.admins.all())

        profile = StaffProfile.objects.get(user=user)
        self.assertEqual(profile.store, hub)
        self.assertEqual(profile.pujasera_group_slug, hub.pujasera_group_slug)

    def test_pujasera_registration_queues_welcome_and_admin_messages(self):
        self._register_pujasera()

        recipients = {
            entry.payload["to"] for entry in QueueEntry.objects.filter(type=JobType.NOTIFICATION_SEND)
        }
        self.assertEqual(recipients, {"6281234567890", "admin_group"})

    def test_tenant_registration_joins_hub(self):
        hub = self._register_pujasera()

        entry = self._run(JobType.TENANT_REGISTRATION, self._tenant_payload(hub.pujasera_group_slug))
        self.assertEqual(entry.status, QueueEntry.STATUS_COMPLETED, entry.error)

        tenant = Store.objects.get(kind=Store.KIND_TENANT)
        self.assertEqual(tenant.pujasera_group_slug, hub.pujasera_group_slug)
        self.assertEqual(tenant.pujasera_name, hub.name)
        self.assertEqual(tenant.location, "Bandung")
        self.assertEqual(tenant.token_balance, Decimal("20"))
        self.assertEqual(User.objects.get(email="kumis@example.com").role, User.ROLE_ADMIN)

    def test_tenant_registration_with_unknown_group_fails_before_identity(self):
        entry = self._run(JobType.TENANT_REGISTRATION, self._tenant_payload("no-such-group"))

        self.assertEqual(entry.status, QueueEntry.STATUS_FAILED)
        self.assertEqual(entry.error, "Grup pujasera tidak ditemukan.")
        self.assertFalse(User.objects.filter(email="kumis@example.com").exists())

    def test_duplicate_email_fails(self):
        User.objects.create_user(email="melati@example.com", password="x")

        entry = self._run(JobType.PUJASERA_REGISTRATION, self._pujasera_payload())
        self.assertEqual(entry.status, QueueEntry.STATUS_FAILED)
        self.assertFalse(Store.objects.exists())

    def test_incomplete_payload_fails(self):
        entry = self._run(JobType.PUJASERA_REGISTRATION, {"pujaseraName": "X"})
        self.assertEqual(entry.status, QueueEntry.STATUS_FAILED)
        self.assertIn("Data registrasi tidak lengkap", entry.error)

    def test_store_write_failure_deletes_identity(self):
        with patch("jobs.handlers.registration._create_profile", side_effect=RuntimeError("write failed")):
            entry = self._run(JobType.PUJASERA_REGISTRATION, self._pujasera_payload())

        self.assertEqual(entry.status, QueueEntry.STATUS_FAILED)
        self.assertIn("write failed", entry.error)
        self.assertFalse(User.objects.filter(email="melati@example.com").exists())
        self.assertFalse(Store.objects.exists())
        self.assertFalse(QueueEntry.objects.filter(type=JobType.NOTIFICATION_SEND).exists())

    def test_failed_compensation_is_logged_and_original_error_kept(self):
        context = make_context(identity_provider=BrokenDeleteProvider())

        with patch("jobs.handlers.registration._create_profile", side_effect=RuntimeError("write failed")):
            with self.assertLogs("jobs.handlers.registration", level="ERROR") as logs:
                entry = self._run(JobType.PUJASERA_REGISTRATION, self._pujasera_payload(), context=context)

        self.assertEqual(entry.status, QueueEntry.STATUS_FAILED)
        self.assertIn("write failed", entry.error)
        self.assertTrue(any("Failed to clean up orphaned identity" in line for line in logs.output))
