# jobs/context.py

"""
JOB CONTEXT

Explicit configuration handed to every handler. Built once per processor
invocation; handlers never read settings or the fee table themselves.
"""

from __future__ import annotations

from dataclasses import dataclass

from jobs.services.whatsapp import NotificationConfig, WhatsAppGateway
from sales.services.fees import FeeScheduleConfig
from users.services.identity import DjangoIdentityProvider


@dataclass(frozen=True)
class JobContext:
    fee_schedule: FeeScheduleConfig
    notifications: NotificationConfig
    gateway: WhatsAppGateway
    identity_provider: DjangoIdentityProvider

    @classmethod
    def load(cls) -> "JobContext":
        notifications = NotificationConfig.from_settings()
        return cls(
            fee_schedule=FeeScheduleConfig.from_model(),
            notifications=notifications,
            gateway=WhatsAppGateway(notifications),
            identity_provider=DjangoIdentityProvider(),
        )
