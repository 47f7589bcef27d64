# jobs/tests/fixtures.py

from jobs.context import JobContext
from jobs.services.whatsapp import NotificationConfig, WhatsAppGateway
from sales.services.fees import FeeScheduleConfig
from users.services.identity import DjangoIdentityProvider


def make_context(*, device_id="device-1", admin_group="group-1", fee_schedule=None, identity_provider=None):
    notifications = NotificationConfig(device_id=device_id, admin_group=admin_group, base_url="https://wa.test/api")
    return JobContext(
        fee_schedule=fee_schedule or FeeScheduleConfig.defaults(),
        notifications=notifications,
        gateway=WhatsAppGateway(notifications),
        identity_provider=identity_provider or DjangoIdentityProvider(),
    )
